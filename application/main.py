import argparse
import json
import sys

import structlog

from application.context import AppContext, build_context
from config.logging import configure_logging
from config.settings import API_HOST, API_PORT, DASHBOARD_LIMIT, DB_URL, LOG_LEVEL
from domain.errors import CourierRiskError

logger = structlog.get_logger(__name__)


def _print(data) -> None:
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="courier-risk")
    parser.add_argument("--db-url", default=DB_URL, help="URL SQLAlchemy do banco.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("install", help="Cria as tabelas e as configurações padrão.")
    sub.add_parser("uninstall", help="Remove as tabelas e as configurações.")

    serve = sub.add_parser("serve", help="Sobe o endpoint HTTP /vw/v1/check.")
    serve.add_argument("--host", default=API_HOST)
    serve.add_argument("--port", type=int, default=API_PORT)

    sched = sub.add_parser("scheduler", help="Atualização periódica dos provedores.")
    sched.add_argument(
        "--once",
        action="store_true",
        help="Executa apenas uma vez e sai (sem scheduler)."
    )

    dash = sub.add_parser("dashboard", help="Resumo geral.")
    dash.add_argument("--limit", type=int, default=DASHBOARD_LIMIT)

    lookup = sub.add_parser("lookup", help="Consulta um telefone.")
    lookup.add_argument("phone")
    lookup.add_argument("--refresh", action="store_true", help="Atualiza nos provedores antes.")

    imp = sub.add_parser("import", help="Grava contadores manualmente.")
    imp.add_argument("phone")
    imp.add_argument("courier")
    imp.add_argument("delivered", type=int)
    imp.add_argument("returned", type=int)
    imp.add_argument("cancelled", type=int)

    rm = sub.add_parser("delete", help="Remove um registro pelo id.")
    rm.add_argument("id", type=int)

    prov = sub.add_parser("providers", help="Lista ou altera os provedores.")
    prov.add_argument("--enable", action="append", default=[], metavar="SLUG")
    prov.add_argument("--disable", action="append", default=[], metavar="SLUG")
    return parser


def run(args: argparse.Namespace, context: AppContext):
    if args.command == "install":
        context.lifecycle().install()
        return {"installed": True}

    if args.command == "uninstall":
        context.lifecycle().uninstall()
        return {"uninstalled": True}

    if args.command == "serve":
        import uvicorn
        from adapters.http.check_api import create_app
        uvicorn.run(create_app(context), host=args.host, port=args.port, log_config=None)
        return None

    if args.command == "scheduler":
        job = context.refresh()
        if args.once:
            return [r.to_dict() for r in job.execute()]
        from adapters.scheduling.cron_scheduler import CronScheduler
        CronScheduler(job).start()
        return None

    if args.command == "dashboard":
        return context.dashboard().execute(args.limit, args.limit)

    if args.command == "lookup":
        result = {}
        if args.refresh:
            result["refresh"] = context.refresh().refresh_phone(args.phone).to_dict()
        result.update(context.lookup().execute(args.phone))
        return result

    if args.command == "import":
        record = context.importer().execute(
            args.phone, args.courier, args.delivered, args.returned, args.cancelled
        )
        return record.to_dict()

    if args.command == "delete":
        return {"id": args.id, "deleted": context.deleter().execute(args.id)}

    if args.command == "providers":
        manager = context.provider_settings()
        settings = manager.load()
        for slug in args.enable:
            settings = manager.toggle(slug, True)
        for slug in args.disable:
            settings = manager.toggle(slug, False)
        return settings

    raise ValueError(f"unknown command: {args.command}")


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(LOG_LEVEL)

    try:
        context = build_context(args.db_url)
        result = run(args, context)
    except CourierRiskError as exc:
        logger.error("cli.error", command=args.command, error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if result is not None:
        _print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
