#!/usr/bin/env python3
"""
lazyconfigctl - Settings File Management CLI for LazyConfig

Provides command-line access to a LazyConfig settings file:
- Read, write and delete individual settings
- List all settings (encrypted values masked unless requested)
- Report string settings that are still empty
- Run the first-run / subsequent-run demo flow

Usage:
    lazyconfigctl get CompatibleVersion
    lazyconfigctl set User alice
    lazyconfigctl --passphrase "super-secret-passphrase" --salt-hex f94a... get APIKey
    lazyconfigctl list -o json
    lazyconfigctl check --fill "You should configure a value here."
    lazyconfigctl demo

Environment Variables:
    LAZYCONFIG_FILE            - Settings file path (default: settings.config)
    LAZYCONFIG_PASSPHRASE      - Cipher passphrase
    LAZYCONFIG_SALT            - Cipher salt as hex
    LAZYCONFIG_KDF_ITERATIONS  - PBKDF2 iteration count
"""

import argparse
import json
import logging
import os
import platform
import sys
from datetime import datetime, timedelta
from typing import Optional

import psutil

from lazyconfig.config.persistence import LoadStatus
from lazyconfig.config.policy import SettingType
from lazyconfig.config.settings import AppSettings, try_parse
from lazyconfig.config.store import LazyConfigStore
from lazyconfig.constants import default_kdf_iterations
from lazyconfig.crypto.cipher import AesPortableEncryptor
from lazyconfig.errors import (
    DecryptionFailure,
    EncryptionFailure,
    InvalidCipherParameters,
    SettingParseError,
)
from lazyconfig.logging_config import configure_from_environment, is_verbose
from lazyconfig.utils.extensions import find_empty_settings, hex_to_bytes, to_readable_string

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_DECRYPTION = 2

SAMPLE_VERSION = "1.0.0"
SAMPLE_API_KEY = "ThisRepresentsASampleAPIKey"
EMPTY_HINT = "You should configure a value here."
MASK = "********"


# ANSI color codes
class Colors:
    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[91m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    CYAN = '\033[96m'

    @classmethod
    def disable(cls):
        """Disable colors for non-TTY output."""
        cls.RESET = ''
        cls.BOLD = ''
        cls.RED = ''
        cls.GREEN = ''
        cls.YELLOW = ''
        cls.CYAN = ''


def print_error(msg: str) -> None:
    """Print error message."""
    print(f"{Colors.RED}Error:{Colors.RESET} {msg}", file=sys.stderr)


def print_success(msg: str) -> None:
    """Print success message."""
    print(f"{Colors.GREEN}✓{Colors.RESET} {msg}")


def print_warning(msg: str) -> None:
    """Print warning message."""
    print(f"{Colors.YELLOW}Warning:{Colors.RESET} {msg}")


def print_info(msg: str) -> None:
    """Print info message."""
    print(f"{Colors.CYAN}ℹ{Colors.RESET} {msg}")


class ConfigCLI:
    """CLI handler for settings commands."""

    def __init__(
        self,
        path: Optional[str] = None,
        passphrase: Optional[str] = None,
        salt_hex: Optional[str] = None,
        iterations: Optional[int] = None,
    ):
        self.path = path or os.environ.get('LAZYCONFIG_FILE')
        self.passphrase = passphrase or os.environ.get('LAZYCONFIG_PASSPHRASE')
        self.salt_hex = salt_hex or os.environ.get('LAZYCONFIG_SALT')
        self.iterations = iterations or default_kdf_iterations()
        self._settings: Optional[AppSettings] = None

    def _build_encryptor(self) -> Optional[AesPortableEncryptor]:
        if not self.passphrase:
            return None
        if not self.salt_hex:
            raise InvalidCipherParameters('salt', "A salt is required when a passphrase is given.")
        try:
            salt = hex_to_bytes(self.salt_hex)
        except ValueError as e:
            raise InvalidCipherParameters('salt', f"Salt is not valid hex: {e}") from e
        return AesPortableEncryptor(self.passphrase, salt, self.iterations)

    @property
    def settings(self) -> AppSettings:
        if self._settings is None:
            store = LazyConfigStore(
                self.path,
                encryptor=self._build_encryptor(),
                policy=AppSettings.policy(),
            )
            self._settings = AppSettings(store=store)
        return self._settings

    @property
    def store(self) -> LazyConfigStore:
        return self.settings.store

    def _missing_cipher(self, key: str) -> bool:
        """Report an encrypted key requested without a passphrase."""
        if self.store.policy.is_encrypted(key) and not self.store.encryption_enabled:
            print_error(f"'{key}' is an encrypted setting; --passphrase and --salt-hex are required")
            return True
        return False

    def _check_load(self) -> None:
        status = self.store.settings_file.last_load_status
        if status is LoadStatus.CORRUPT:
            print_warning(f"Settings file {self.store.path} could not be read; starting empty")
            backup = self.store.settings_file.corrupt_backup
            if backup:
                print_info(f"Previous contents preserved in {backup}")

    def cmd_get(self, args: argparse.Namespace) -> int:
        if self._missing_cipher(args.key):
            return EXIT_ERROR
        value = self.store.get(args.key)
        self._check_load()
        if value is None:
            print_error(f"Setting not found: {args.key}")
            return EXIT_ERROR
        print(value)
        return EXIT_OK

    def cmd_set(self, args: argparse.Namespace) -> int:
        try:
            spec = self.settings.spec_for(args.key)
        except KeyError:
            spec = None
        if spec is not None and spec.type is not SettingType.STRING:
            ok, _ = try_parse(spec.type, args.value)
            if not ok:
                print_error(f"'{args.value}' is not a valid {spec.type.value} for {spec.key}")
                return EXIT_ERROR

        if self._missing_cipher(args.key):
            return EXIT_ERROR
        self.store.set(args.key, args.value)
        self._check_load()
        if self.store.settings_file.last_save_error:
            print_error(str(self.store.settings_file.last_save_error))
            return EXIT_ERROR
        print_success(f"{args.key} saved")
        return EXIT_OK

    def cmd_delete(self, args: argparse.Namespace) -> int:
        if not self.store.delete(args.key):
            print_error(f"Setting not found: {args.key}")
            return EXIT_ERROR
        print_success(f"{args.key} deleted")
        return EXIT_OK

    def cmd_list(self, args: argparse.Namespace) -> int:
        values = {}
        for key in sorted(self.store.keys(), key=str.lower):
            if self.store.policy.is_encrypted(key) and not args.show_secrets:
                values[key] = MASK if self.store.raw(key) else self.store.raw(key)
            else:
                values[key] = self.store.get(key)
        self._check_load()

        if args.output == 'json':
            print(json.dumps(values, indent=2, ensure_ascii=False))
            return EXIT_OK

        if not values:
            print_info(f"No settings in {self.store.path}")
            return EXIT_OK

        width = max(len(key) for key in values)
        for key, value in values.items():
            print(f"  {Colors.BOLD}{key:<{width}}{Colors.RESET}  {value if value is not None else ''}")
        return EXIT_OK

    def cmd_check(self, args: argparse.Namespace) -> int:
        empty = find_empty_settings(self.settings, args.fill or "")
        if not empty:
            print_success("All properties are set.")
            return EXIT_OK

        print_warning("The following properties are empty:")
        for key in empty:
            print(f"  - {key}")
        return EXIT_OK

    def cmd_demo(self, args: argparse.Namespace) -> int:
        settings = self.settings
        print_success(f"Using settings file {self.store.path}")

        if not settings.compatible_version:
            print_info("First run, writing defaults")
            settings.compatible_version = SAMPLE_VERSION
            settings.first_run = True
            settings.logging_enabled = False
            settings.last_use = datetime.min
            settings.user = platform.node() or "unknown"
            settings.position_x = 100
            settings.position_y = 100
            if self.store.encryption_enabled:
                settings.api_key = SAMPLE_API_KEY
            else:
                print_warning("No passphrase given, skipping the encrypted APIKey setting")
        else:
            settings.first_run = False
            if self.store.encryption_enabled:
                print(f"[DECRYPTED] APIKey='{settings.api_key}'")
            else:
                print_warning("No passphrase given, the encrypted APIKey setting is left untouched")

            empty = find_empty_settings(settings, EMPTY_HINT)
            if empty:
                print_warning("The following properties are empty:")
                for key in empty:
                    print(f"  - {key}")
            else:
                print_success("All properties are set.")

        settings.metrics = process_metrics()
        settings.last_use = datetime.now()
        print_info(settings.metrics)
        return EXIT_OK


def process_metrics() -> str:
    """Describe this process's memory and CPU usage."""
    proc = psutil.Process()
    memory_mb = proc.memory_info().rss // 1024 // 1024
    cpu = proc.cpu_times()
    cpu_time = timedelta(seconds=cpu.user + cpu.system)
    cores = psutil.cpu_count() or 1
    return (
        f"Process used {memory_mb}MB of memory and {to_readable_string(cpu_time)} "
        f"TotalProcessorTime on {cores} possible cores."
    )


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='lazyconfigctl',
        description='Settings File Management CLI for LazyConfig',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lazyconfigctl get CompatibleVersion
  lazyconfigctl set User alice
  lazyconfigctl --passphrase "super-secret-passphrase" --salt-hex f94aaa0dacf2454fb0b8ab2aa8ec1465 get APIKey
  lazyconfigctl list -o json
  lazyconfigctl check
  lazyconfigctl demo
        """
    )

    parser.add_argument(
        '--no-color', action='store_true',
        help='Disable colored output'
    )
    parser.add_argument(
        '-v', '--verbose', action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '-f', '--file', metavar='PATH',
        help='Settings file (default: settings.config next to the application)'
    )
    parser.add_argument(
        '--passphrase', metavar='TEXT',
        help='Cipher passphrase, at least 16 characters'
    )
    parser.add_argument(
        '--salt-hex', metavar='HEX',
        help='Cipher salt as hex, at least 16 bytes'
    )
    parser.add_argument(
        '--iterations', type=int, metavar='N',
        help='PBKDF2 iteration count (minimum 10000)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    get_parser = subparsers.add_parser('get', help='Print one setting')
    get_parser.add_argument('key', help='Setting key (case-insensitive)')

    set_parser = subparsers.add_parser('set', help='Store one setting')
    set_parser.add_argument('key', help='Setting key (case-insensitive)')
    set_parser.add_argument('value', help='Value to store')

    delete_parser = subparsers.add_parser('delete', aliases=['rm'], help='Remove one setting')
    delete_parser.add_argument('key', help='Setting key (case-insensitive)')

    list_parser = subparsers.add_parser('list', aliases=['ls'], help='List settings')
    list_parser.add_argument(
        '-o', '--output', choices=['text', 'json'], default='text',
        help='Output format'
    )
    list_parser.add_argument(
        '--show-secrets', action='store_true',
        help='Decrypt and show encrypted settings'
    )

    check_parser = subparsers.add_parser('check', help='Report empty string settings')
    check_parser.add_argument(
        '--fill', metavar='TEXT',
        help='Store TEXT in every empty setting found'
    )

    subparsers.add_parser('demo', help='Run the first-run / subsequent-run demo')

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.no_color or not sys.stdout.isatty():
        Colors.disable()

    configure_from_environment(verbose=args.verbose)

    if not args.command:
        parser.print_help()
        return EXIT_ERROR

    cli = ConfigCLI(
        path=args.file,
        passphrase=args.passphrase,
        salt_hex=args.salt_hex,
        iterations=args.iterations,
    )

    commands = {
        'get': cli.cmd_get,
        'set': cli.cmd_set,
        'delete': cli.cmd_delete,
        'rm': cli.cmd_delete,
        'list': cli.cmd_list,
        'ls': cli.cmd_list,
        'check': cli.cmd_check,
        'demo': cli.cmd_demo,
    }

    try:
        return commands[args.command](args)
    except DecryptionFailure as e:
        _log_failure(args.command)
        print_error(f"{e} (wrong passphrase or salt?)")
        return EXIT_DECRYPTION
    except (InvalidCipherParameters, EncryptionFailure, SettingParseError) as e:
        _log_failure(args.command)
        print_error(str(e))
        return EXIT_ERROR


def _log_failure(command: str) -> None:
    """With -v, log the traceback of the exception being handled."""
    if is_verbose():
        logger.exception(f"Command '{command}' failed")


if __name__ == '__main__':
    sys.exit(main())
