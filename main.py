"""
Main entry point for the Jira data store.

Usage:
    python main.py                          # Crawl using config.yaml
    python main.py --config other.yaml      # Use a different config file
    python main.py --jql "project = ABC"    # Override the issue query
    python main.py --output issues.jsonl    # Override the output file
    python main.py --debug                  # Debug mode
"""

import argparse
import sys
from typing import Any, Dict, Mapping

from tqdm import tqdm

from jira_datastore.config import JQL_PARAM, DataStoreParams, load_config
from jira_datastore.datastore import JiraDataStore
from jira_datastore.exceptions import ConfigurationError, JiraApiError
from jira_datastore.sink import IndexUpdateCallback, JsonlIndexWriter
from jira_datastore.utils import calculate_file_size, setup_logging

logger = None  # Will be initialized after config is loaded


def parse_arguments() -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description='Crawl Jira issues into a JSONL search index feed',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                 # Crawl with config.yaml
  python main.py --jql "project = KAFKA"         # Only issues of one project
  python main.py --output data/kafka.jsonl       # Write somewhere else
  python main.py --debug                         # Enable debug logging
        """
    )

    parser.add_argument(
        '--config',
        type=str,
        default='config.yaml',
        help='Path to configuration file (default: config.yaml)'
    )

    parser.add_argument(
        '--jql',
        type=str,
        help='JQL query (overrides issue.jql from config)'
    )

    parser.add_argument(
        '--output',
        type=str,
        help='Output JSONL file (overrides output.path from config)'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args()


class ProgressCallback(IndexUpdateCallback):
    """Forwards records to another sink and ticks a progress bar."""

    def __init__(self, delegate: IndexUpdateCallback, progress: tqdm):
        self.delegate = delegate
        self.progress = progress

    def store(self, params: Mapping[str, str], record: Dict[str, Any]) -> None:
        self.delegate.store(params, record)
        self.progress.update(1)


def build_defaults(config, params: DataStoreParams) -> Dict[str, Any]:
    """
    Default fields for every record.

    default_permissions from the datastore section is added as the
    'permissions' field.
    """
    defaults = config.defaults
    permissions = params.default_permissions
    if permissions:
        defaults['permissions'] = permissions
    return defaults


def main():
    """Main entry point."""
    global logger

    args = parse_arguments()

    try:
        config = load_config(args.config)

        if args.debug:
            config.set('logging.level', 'DEBUG')

        logger = setup_logging(config)

        logger.info("=" * 60)
        logger.info("Jira Data Store")
        logger.info("=" * 60)
        logger.info(f"Configuration loaded from: {args.config}")

        params = config.params
        if args.jql is not None:
            params = DataStoreParams({**params.as_dict(), JQL_PARAM: args.jql})

        output_path = args.output or config.output_path
        writer = JsonlIndexWriter(output_path, ignore_error=params.ignore_error)

        with tqdm(desc="Indexing issues", unit="issue") as progress:
            summary = JiraDataStore().store_data(
                ProgressCallback(writer, progress),
                params,
                build_defaults(config, params)
            )
        writer.finish()

        logger.info("=" * 60)
        logger.info("CRAWL SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Stored issues: {summary.stored}")
        logger.info(f"Skipped issues: {summary.skipped}")
        for error in summary.errors:
            logger.warning(f"  - {error}")
        logger.info(f"Output written to {output_path} ({calculate_file_size(output_path)})")
        sys.exit(0)

    except KeyboardInterrupt:
        if logger:
            logger.warning("Interrupted by user.")
        sys.exit(130)

    except ConfigurationError as e:
        # Already logged by the data store.
        if logger is None:
            print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    except JiraApiError as e:
        logger.error(f"Jira request failed, aborting: {e}")
        sys.exit(1)

    except Exception as e:
        if logger:
            logger.error(f"Fatal error: {e}", exc_info=True)
        else:
            print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
