#!/usr/bin/env python3
"""
Trade Journal
Command-line entry point for the journal dashboard.

Usage:
    python main.py dashboard --journal journal.json            # P&L dashboard
    python main.py summary --journal journal.json -o out.json  # JSON summary
    python main.py strategies --journal journal.json           # strategy table
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from shared.constants import CONFIG_PATH
from shared.exceptions import ConfigError
from shared.io_utils import atomic_json_write, load_journal_snapshot
from shared.types import AppConfig
from tracker import JournalDashboard, JournalView, TradeJournal
from utils import load_config, setup_logging, validate_config

logger = logging.getLogger(__name__)


class JournalApp:
    """
    Wires a loaded journal snapshot to the dashboard.
    """

    def __init__(
        self,
        config: AppConfig,
        journal: TradeJournal,
        dashboard: Optional[JournalDashboard] = None,
    ):
        """
        Initialize the app.

        Args:
            config: Configuration dictionary (already loaded & validated).
            journal: Journal holding the trades to analyse.
            dashboard: Pre-built JournalDashboard or None for default.
        """
        self.config = config
        self.journal = journal
        self.dashboard = dashboard or JournalDashboard(config)

    def build_view(self, args: argparse.Namespace) -> JournalView:
        return self.journal.analyze(
            frequency=args.frequency,
            time_range=args.range,
            custom_start=args.start,
            custom_end=args.end,
            strategies=args.strategy,
            emotions=args.emotion,
            language=args.lang,
        )

    def show_dashboard(self, view: JournalView):
        """
        Display P&L dashboard.
        """
        self.dashboard.display_dashboard(view)

    def show_strategies(self, view: JournalView):
        self.dashboard.display_strategies(view)

    def write_summary(self, view: JournalView, output: Optional[str] = None):
        """
        Write the JSON summary to *output*, or stdout when not given.
        """
        summary = self.dashboard.generate_summary(view)
        if output:
            atomic_json_write(Path(output), summary)
            logger.info(f"Summary written to {output}")
        else:
            print(json.dumps(summary, indent=2, ensure_ascii=False, default=str))


def create_app(config_file: str, journal_file: str, portfolios=None) -> JournalApp:
    """Factory: load config + snapshot, validate, set up logging, build the app.

    Args:
        config_file: Path to the YAML configuration file.
        journal_file: Path to the journal snapshot JSON.
        portfolios: Active portfolio ids overriding the snapshot's selection.

    Returns:
        A fully initialised JournalApp.
    """
    try:
        config = load_config(config_file)
        validate_config(config)
    except (FileNotFoundError, ValueError) as e:
        raise ConfigError(str(e)) from e
    setup_logging(config)

    snapshot = load_journal_snapshot(Path(journal_file))
    journal = TradeJournal(
        config,
        trades=snapshot.get('trades', []),
        portfolios=snapshot.get('portfolios', []),
        active_portfolio_ids=portfolios or snapshot.get('activePortfolioIds'),
    )
    return JournalApp(config=config, journal=journal)


def main():
    """
    Main entry point.
    """
    parser = argparse.ArgumentParser(
        description='Trade Journal Dashboard',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py dashboard --journal journal.json
  python main.py dashboard --journal journal.json --frequency weekly --range 3M
  python main.py summary --journal journal.json --range CUSTOM --start 2024-01-01 --end 2024-06-30
  python main.py strategies --journal journal.json --portfolio main --portfolio swing
        """
    )

    parser.add_argument(
        'command',
        choices=['dashboard', 'summary', 'strategies'],
        help='Command to run'
    )
    parser.add_argument('--journal', required=True, help='Journal snapshot JSON file')
    parser.add_argument('--config', default=CONFIG_PATH, help='Config file path (default: config.yaml next to the code)')
    parser.add_argument(
        '--frequency',
        choices=['daily', 'weekly', 'monthly', 'quarterly', 'yearly'],
        help='Equity curve bucket size (default: from config)'
    )
    parser.add_argument(
        '--range',
        choices=['ALL', '1M', '3M', 'YTD', 'CUSTOM'],
        help='Time range (default: from config)'
    )
    parser.add_argument('--start', help='CUSTOM range start (YYYY-MM-DD)')
    parser.add_argument('--end', help='CUSTOM range end (YYYY-MM-DD)')
    parser.add_argument('--portfolio', action='append', help='Active portfolio id (repeatable)')
    parser.add_argument('--strategy', action='append', help='Only these strategy tags (repeatable)')
    parser.add_argument('--emotion', action='append', help='Only these emotion tags (repeatable)')
    parser.add_argument('--lang', choices=['en', 'zh'], help='Label language')
    parser.add_argument('-o', '--output', help='Write summary JSON to this file')

    args = parser.parse_args()

    try:
        app = create_app(args.config, args.journal, portfolios=args.portfolio)
        view = app.build_view(args)

        if args.command == 'dashboard':
            app.show_dashboard(view)

        elif args.command == 'summary':
            app.write_summary(view, args.output)

        elif args.command == 'strategies':
            app.show_strategies(view)

        logger.info("Command completed successfully")

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)

    except Exception as e:
        logger.error(f"Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
