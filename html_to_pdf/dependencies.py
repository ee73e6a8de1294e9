#!/usr/bin/env python3
"""
Rendering prerequisites: Python packages and the Chromium build Playwright drives.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

import importlib.util
import platform
import re
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from colorama import Fore, Style, init

init(autoreset=True)

# (distribution name, import name, required)
PYTHON_REQUIREMENTS = [
    ("playwright", "playwright", True),
    ("colorama", "colorama", True),
]

_INSTALL_LOCATION = re.compile(r'Install location:\s*(\S+)')


@dataclass(frozen=True)
class DependencyStatus:
    name: str
    available: bool
    required: bool = True
    detail: str = ""
    hint: str = ""


def chromium_install_command(system: Optional[str] = None) -> str:
    """Command that installs the Chromium build used for printing."""
    system = system or platform.system()
    # system libraries are only pulled in on Linux
    deps = " --with-deps" if system == "Linux" else ""
    return f"{sys.executable} -m playwright install{deps} chromium"


class DependencyChecker:
    """Reports whether PDF rendering can run in this environment."""

    def __init__(self, timeout: float = 10):
        self.system = platform.system()
        self.timeout = timeout

    def check_python_package(self, package_name: str, import_name: Optional[str] = None) -> DependencyStatus:
        found = importlib.util.find_spec(import_name or package_name) is not None
        return DependencyStatus(
            name=package_name,
            available=found,
            detail="installed" if found else "not installed",
            hint="" if found else f"pip install {package_name}",
        )

    def check_chromium(self) -> DependencyStatus:
        """Ask Playwright where Chromium lives and check that the directory exists."""
        try:
            result = subprocess.run(
                [sys.executable, "-m", "playwright", "install", "--dry-run", "chromium"],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            return DependencyStatus("chromium", False, detail=f"playwright CLI failed: {e}",
                                    hint=chromium_install_command(self.system))

        match = _INSTALL_LOCATION.search(result.stdout)
        if result.returncode != 0 or not match:
            return DependencyStatus("chromium", False, detail="install location unknown",
                                    hint=chromium_install_command(self.system))

        location = Path(match.group(1))
        if not location.exists():
            return DependencyStatus("chromium", False, detail=f"not installed ({location})",
                                    hint=chromium_install_command(self.system))
        return DependencyStatus("chromium", True, detail=str(location))

    def check_all(self) -> List[DependencyStatus]:
        statuses = [self.check_python_package(name, module) for name, module, _ in PYTHON_REQUIREMENTS]
        # The browser can only be located through an installed playwright
        if statuses[0].available:
            statuses.append(self.check_chromium())
        return statuses

    def rendering_available(self) -> bool:
        return self.check_python_package("playwright").available and self.check_chromium().available

    def print_summary(self) -> bool:
        """Print one line per dependency. Returns True if every required one is available."""
        print(f"{Fore.CYAN}Checking rendering dependencies ({self.system})...{Style.RESET_ALL}")

        all_ok = True
        for status in self.check_all():
            if status.available:
                print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} {status.name}: {status.detail}")
                continue
            if status.required:
                all_ok = False
            print(f"{Fore.RED}[MISSING]{Style.RESET_ALL} {status.name}: {status.detail}")
            if status.hint:
                print(f"  Run: {status.hint}")

        if all_ok:
            print(f"\n{Fore.GREEN}All dependencies are available!{Style.RESET_ALL}")
        return all_ok


def check_dependencies() -> bool:
    """Convenience function to check dependencies."""
    return DependencyChecker().print_summary()
