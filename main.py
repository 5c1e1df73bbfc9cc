# =============================================================================
# main.py - CLI entry point
# =============================================================================

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from core.account_db import SystemAccountDatabase
from core.ldap_client import LdapDirectoryClient
from processors.sftp_users import SftpUserProcessor
from utils.config import Config, Settings, read_secret_file


def setup_logging(level: str = "INFO", log_dir: str = "logs") -> str:
    """Setup logging configuration with both console and file output"""
    # Create logs directory if it doesn't exist
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    # Generate date-stamped filename
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_filename = log_path / f"provision_sftp_users_{timestamp}.log"

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.upper()))
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Always log DEBUG to file
    file_handler = logging.FileHandler(log_filename, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized - Console: {level.upper()}, File: DEBUG")
    logger.info(f"Log file: {log_filename}")

    return str(log_filename)


def run(settings: Settings) -> int:
    """Provision every entry of the user list; returns the process exit code"""
    logger = logging.getLogger(__name__)

    password = read_secret_file(settings.password_file)

    with LdapDirectoryClient(
            settings.ldap_server, settings.bind_dn,
            password, settings.base_dn
    ) as directory:
        processor = SftpUserProcessor(directory, SystemAccountDatabase(), settings)
        result = processor.process_users(settings.user_list)

    if not result.succeeded:
        return 1

    logger.info("All done.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Create SFTP-only local accounts for users listed in a file, using uid and gecos from LDAP"
    )
    parser.add_argument('user_list', nargs='?',
                        help='File with one "username [: group ...]" entry per line '
                             '(default: $USER_LIST_FILE or ./user_list)')
    parser.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level')
    parser.add_argument('--log-dir', default='logs', help='Directory for log files')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level, args.log_dir)
    logger = logging.getLogger(__name__)

    # Load configuration
    config = Config()
    if not config.validate():
        missing_vars = config.get_missing_vars()
        logger.error(f"Missing required environment variables: {missing_vars}")
        return 1

    settings = config.load_settings(args.user_list)

    for required in (settings.user_list, settings.password_file):
        if not Path(required).is_file():
            logger.error(f"Input file not found: {required}")
            return 1

    try:
        return run(settings)
    except Exception as e:
        logger.error(f"Processing failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
