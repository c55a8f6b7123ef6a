#!/usr/bin/env python3
"""
funcaptcha 命令行入口

Usage:
    funcaptcha token --public-key KEY --site https://example.com
    funcaptcha token --profile openai --json
    funcaptcha profiles
    funcaptcha decrypt --bda BDA --user-agent UA --timestamp 1700000000
"""

import argparse
import json
import logging
import sys
from typing import Dict, List, Optional

from . import __version__
from .client import TokenClient
from .crypto import CipherEngine, KeyDeriver
from .exceptions import FunCaptchaError
from .fingerprint import FingerprintDescriptor
from .http import HTTPConfig, RequestOptions, TransportClient
from .profiles import ProfileRegistry
from .utils.logger import configure_root_logger

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    configure_root_logger(
        level=level,
        log_file=log_file,
        log_to_file=log_file is not None,
        force=True,
    )


def parse_data(pairs: List[str]) -> Dict[str, str]:
    """
    解析 --data k=v 参数

    Raises:
        argparse.ArgumentTypeError: 缺少 "="
    """
    data: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"--data 需要 key=value 格式: {pair!r}")
        data[key] = value
    return data


def build_registry(profile_dirs: List[str]) -> ProfileRegistry:
    registry = ProfileRegistry.default()
    for directory in profile_dirs:
        registry.load_directory(directory)
    return registry


def cmd_token(args: argparse.Namespace) -> int:
    """获取一次 token"""
    config = HTTPConfig.from_env()
    if args.timeout is not None:
        config.connect_timeout = args.timeout
        config.read_timeout = args.timeout
        config.validate()

    headers = {"User-Agent": args.user_agent} if args.user_agent else {}
    options = RequestOptions(
        public_key=args.public_key or "",
        base_url=args.base_url,
        site=args.site,
        data=parse_data(args.data),
        headers=headers,
        location=args.location,
        proxy=args.proxy,
        profile=args.profile,
    )

    with TransportClient(config) as transport:
        client = TokenClient(transport=transport, registry=build_registry(args.profile_dir))
        result = client.get_token(options)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(result.token)
    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """列出可用 profile"""
    registry = build_registry(args.profile_dir)
    for name in registry.names():
        profile = registry.get(name)
        kind = "fixed" if profile.is_fixed else "generic"
        print(f"{name:<12} v{profile.version:<4} {kind:<8} {profile.description}")
    return 0


def cmd_decrypt(args: argparse.Namespace) -> int:
    """用 User-Agent 和时间戳解密 BDA 并输出描述符"""
    passphrase = KeyDeriver().passphrase(args.user_agent, args.timestamp)
    plaintext = CipherEngine().decrypt(args.bda, passphrase)
    descriptor = FingerprintDescriptor.parse(plaintext)
    print(json.dumps(descriptor.to_list(), indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="funcaptcha",
        description="FunCaptcha / Arkose challenge token client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s token --public-key 0000-AAAA --site https://example.com
    %(prog)s token --profile openai --json
    %(prog)s profiles
    %(prog)s decrypt --bda BDA --user-agent "Mozilla/5.0 ..." --timestamp 1700000000
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--log-file", help="Write logs to this file (token/bda masked)")
    parser.add_argument(
        "--profile-dir",
        action="append",
        default=[],
        help="Extra directory of YAML profiles (repeatable)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # token命令
    token_parser = subparsers.add_parser("token", help="Request a challenge token")
    token_parser.add_argument("--public-key", help="Site public key")
    token_parser.add_argument("--site", help="Site origin the token is requested for")
    token_parser.add_argument("--base-url", help="Verification service base URL")
    token_parser.add_argument("--location", default="", help="Page location reported in the descriptor")
    token_parser.add_argument("--user-agent", help="User-Agent to emulate")
    token_parser.add_argument(
        "--data", action="append", default=[], metavar="KEY=VALUE", help="Extra data[KEY] field"
    )
    token_parser.add_argument("--profile", default="generic", help="Integration profile")
    token_parser.add_argument("--proxy", help="Proxy URL for this request")
    token_parser.add_argument("--timeout", type=float, help="Connect/read timeout (seconds)")
    token_parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    token_parser.set_defaults(func=cmd_token)

    # profiles命令
    profiles_parser = subparsers.add_parser("profiles", help="List integration profiles")
    profiles_parser.set_defaults(func=cmd_profiles)

    # decrypt命令
    decrypt_parser = subparsers.add_parser("decrypt", help="Decrypt a BDA into its descriptor")
    decrypt_parser.add_argument("--bda", required=True, help="BDA value")
    decrypt_parser.add_argument("--user-agent", required=True, help="User-Agent used to encrypt")
    decrypt_parser.add_argument(
        "--timestamp", type=float, help="Unix time of encryption (default: now)"
    )
    decrypt_parser.set_defaults(func=cmd_decrypt)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 2

    setup_logging(args.verbose, args.log_file)

    try:
        return args.func(args)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    except FunCaptchaError as e:
        logger.debug("命令失败", exc_info=True)
        print(f"[!] {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n[!] Interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
