"""
Main entry point for the Price Research System.
Provides command-line interface and system initialization.
"""

import asyncio
import argparse
import sys
from pathlib import Path
from typing import Optional

from utils import rm_logger, api_logger, config_manager, format_date_br, PriceResearchError, REPORT_DIR
from utils.report import format_currency
from research_manager import research_manager


class PriceResearchSystem:
    """Command line front end of the price research system"""

    def __init__(self):
        self.config = config_manager
        self.manager = research_manager

    async def initialize(self):
        """Initialise storage"""
        rm_logger.info("[Main] Initializing Price Research System...")
        await self.manager.initialize()

    async def start_api_server(self, host: str = None, port: int = None):
        """Start the API server"""
        from api.app import app as api_app
        import uvicorn

        api_config = self.config.get_api_config()
        final_host = host if host is not None else api_config.host
        final_port = port if port is not None else api_config.port

        api_logger.info(f"[Main] Starting API server on {final_host}:{final_port}...")
        config = uvicorn.Config(
            api_app,
            host=final_host,
            port=final_port,
            workers=api_config.workers,
            reload=api_config.reload,
            log_level="info"
        )
        server = uvicorn.Server(config)
        await server.serve()

    async def show_system_status(self):
        """Show system status"""
        status = await self.manager.get_system_status()
        storage = status.get('storage', {})
        pricing = status.get('pricing', {})

        print("\n" + "=" * 60)
        print("         PRICE RESEARCH SYSTEM STATUS")
        print("=" * 60)

        print("\nStorage:")
        print(f"   Backend: {storage.get('backend')}")
        print(f"   Path: {storage.get('path')}")
        print(f"   Processes: {storage.get('processes', 0):,}")
        print(f"   Items: {storage.get('items', 0):,}")
        print(f"   Quotes: {storage.get('quotes', 0):,}")

        print("\nPricing:")
        print(f"   Private quotes valid for: {pricing.get('private_expiry_days')} days")
        print(f"   Public quotes valid for: {pricing.get('public_expiry_days')} days")
        print(f"   Minimum valid quotes: {pricing.get('min_valid_quotes')}")
        print(f"   Maximum CV: {pricing.get('max_cv')}%")

        print("\n" + "=" * 60)

    async def list_processes(self):
        processes = await self.manager.list_processes()
        if not processes:
            print("Nenhum processo cadastrado.")
            return

        for process in processes:
            summary = await self.manager.get_process_summary(process['id'])
            print(f"[{process['id']}] {process['process_number']} - {process['object']} "
                  f"({format_date_br(process['created_at'])}, {len(summary['items'])} itens, "
                  f"{format_currency(summary['grand_total'])})")

    async def export_report(self, process_id: int, report: str, output_format: str,
                            output: Optional[str] = None):
        """Print or save a report"""
        if report == 'alerts':
            content = await self.manager.export_alerts(process_id, output_format)
        else:
            content = await self.manager.export_price_map(process_id, output_format)

        if output is None and output_format in ('html', 'csv'):
            REPORT_DIR.mkdir(parents=True, exist_ok=True)
            output = str(REPORT_DIR / f"{report}_{process_id}.{output_format}")

        if output:
            Path(output).write_text(content, encoding='utf-8')
            print(f"Relatório salvo em {output}")
        else:
            print(content)

    async def import_file(self, kind: str, target_id: int, file_path: str):
        """Import pasted text from a file"""
        text = Path(file_path).read_text(encoding='utf-8')

        if kind == 'items':
            result = await self.manager.import_items_text(target_id, text)
        elif kind == 'quotes':
            result = await self.manager.import_quotes_text(target_id, text)
        else:
            result = await self.manager.import_banco_precos(target_id, text)

        print(f"Importados: {result['imported']}")
        for skipped in result.get('skipped', []):
            print(f"   Linha {skipped['line_number']} ignorada: {skipped['reason']}")
        for spec in result.get('unmatched', []):
            print(f"   Sem item correspondente: {spec}")

    async def shutdown(self):
        await self.manager.close()


def create_parser():
    """Build the argument parser"""
    parser = argparse.ArgumentParser(
        description="Price Research System - pesquisa de preços para contratações públicas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py api --port 3000                       # Start the API server
  python main.py init                                  # Initialise storage
  python main.py status                                # Show system status
  python main.py processes                             # List all processes
  python main.py report 1 --format console             # Print the price map
  python main.py report 1 --type alerts                # Print the alerts
  python main.py import-items 1 itens.tsv              # Import items
  python main.py import-quotes 7 cotacoes.tsv          # Import quotes
  python main.py import-banco-precos 1 export.txt      # Import a Banco de Preços export
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    api_parser = subparsers.add_parser('api', help='Start the API server')
    api_parser.add_argument('--host', default=None, help='Bind address (default: api_config.host)')
    api_parser.add_argument('--port', type=int, default=None, help='Bind port (default: api_config.port)')

    subparsers.add_parser('init', help='Initialise storage')
    subparsers.add_parser('status', help='Show system status')
    subparsers.add_parser('processes', help='List processes')

    report_parser = subparsers.add_parser('report', help='Generate a report')
    report_parser.add_argument('process_id', type=int, help='Process id')
    report_parser.add_argument('--type', choices=['price_map', 'alerts'], default='price_map', help='Report type')
    report_parser.add_argument('--format', choices=['html', 'console', 'csv', 'json'], default='console',
                               help='Output format')
    report_parser.add_argument('--output', type=str, help='Output file path')

    items_parser = subparsers.add_parser('import-items', help='Import items (specification, unit, quantity)')
    items_parser.add_argument('process_id', type=int)
    items_parser.add_argument('file', type=str)

    quotes_parser = subparsers.add_parser('import-quotes', help='Import quotes (source, date, type, unit price)')
    quotes_parser.add_argument('item_id', type=int)
    quotes_parser.add_argument('file', type=str)

    banco_parser = subparsers.add_parser('import-banco-precos', help='Import a Banco de Preços export')
    banco_parser.add_argument('process_id', type=int)
    banco_parser.add_argument('file', type=str)

    return parser


async def main():
    """Entry point"""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    system = PriceResearchSystem()

    try:
        if args.command == 'api':
            await system.start_api_server(host=args.host, port=args.port)
            return

        await system.initialize()

        if args.command == 'init':
            print("Armazenamento inicializado.")

        elif args.command == 'status':
            await system.show_system_status()

        elif args.command == 'processes':
            await system.list_processes()

        elif args.command == 'report':
            await system.export_report(args.process_id, args.type, args.format, args.output)

        elif args.command == 'import-items':
            await system.import_file('items', args.process_id, args.file)

        elif args.command == 'import-quotes':
            await system.import_file('quotes', args.item_id, args.file)

        elif args.command == 'import-banco-precos':
            await system.import_file('banco_precos', args.process_id, args.file)

    except PriceResearchError as e:
        rm_logger.error(f"[Main] {e}")
        print(f"Erro: {e.message}")
        sys.exit(1)
    finally:
        await system.shutdown()


def cli():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user")


if __name__ == "__main__":
    cli()
