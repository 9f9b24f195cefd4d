"""LAN address discovery for the dev server banner."""
import ipaddress
import logging
import platform
import re
import subprocess
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)

FALLBACK_HOST = "localhost"

_IPCONFIG_RE = re.compile(r"IPv4 Address[\s.]*:\s*(\S+)")
_ROUTE_SRC_RE = re.compile(r"\bsrc\s+(\S+)")
_INET_RE = re.compile(r"\binet\s+(?:addr:)?(\S+)")


def _is_usable_ipv4(value: str) -> bool:
    try:
        address = ipaddress.IPv4Address(value.split("/")[0])
    except ValueError:
        return False
    return not address.is_loopback and not address.is_unspecified


def parse_ipconfig(output: str) -> Optional[str]:
    """First IPv4 address from Windows ``ipconfig`` output."""
    for match in _IPCONFIG_RE.finditer(output):
        candidate = match.group(1).split("(")[0]
        if _is_usable_ipv4(candidate):
            return candidate
    return None


def parse_hostname_i(output: str) -> Optional[str]:
    """First non-loopback IPv4 from ``hostname -I``."""
    for token in output.split():
        if _is_usable_ipv4(token):
            return token
    return None


def parse_ip_route(output: str) -> Optional[str]:
    """Source address from ``ip route get 1``."""
    match = _ROUTE_SRC_RE.search(output)
    if match and _is_usable_ipv4(match.group(1)):
        return match.group(1)
    return None


def parse_ifconfig(output: str) -> Optional[str]:
    """First non-loopback ``inet`` address from ``ifconfig``."""
    for match in _INET_RE.finditer(output):
        candidate = match.group(1).split("/")[0]
        if _is_usable_ipv4(candidate):
            return candidate
    return None


def _run(command: Sequence[str]) -> Optional[str]:
    try:
        completed = subprocess.run(
            list(command),
            capture_output=True,
            text=True,
            timeout=3,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("Command %s failed: %s", command[0], exc)
        return None
    if completed.returncode != 0:
        return None
    return completed.stdout


UNIX_COMMANDS: List[tuple] = [
    (("hostname", "-I"), parse_hostname_i),
    (("ip", "route", "get", "1"), parse_ip_route),
    (("ifconfig",), parse_ifconfig),
]


def get_lan_ip(
    system: Optional[str] = None,
    runner: Callable[[Sequence[str]], Optional[str]] = _run,
) -> str:
    """Best-effort LAN IPv4 address of this machine.

    Windows parses ``ipconfig``; other systems try ``hostname -I``, then
    ``ip route get 1``, then ``ifconfig``. Falls back to ``localhost``.
    """
    system = system or platform.system()
    if system == "Windows":
        commands = [(("ipconfig",), parse_ipconfig)]
    else:
        commands = UNIX_COMMANDS

    for command, parser in commands:
        output = runner(command)
        if not output:
            continue
        address = parser(output)
        if address:
            return address
    return FALLBACK_HOST
