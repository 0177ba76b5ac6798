"""
Build-health smoke check.

Usage:
    python -m investpro.verify

Checks that the package's source files are present, that the application
imports, and that every expected route is registered. Prints one line per
check and exits non-zero if any fails.
"""

import importlib
import sys
from pathlib import Path
from typing import Callable, List, Tuple


PACKAGE_DIR = Path(__file__).resolve().parent

REQUIRED_FILES = (
    "main.py",
    "middleware.py",
    "demo_data.py",
    "seed.py",
    "core/config.py",
    "core/logging.py",
    "core/exceptions.py",
    "core/cache.py",
    "core/resilience.py",
    "db/session.py",
    "db/base.py",
    "models/user.py",
    "models/company.py",
    "models/investment.py",
    "models/subscription.py",
    "services/validation.py",
    "services/analytics.py",
    "services/dashboard_service.py",
    "state/stores.py",
    "api/v1/api.py",
)

# (method, path) pairs relative to the API prefix.
EXPECTED_ROUTES = (
    ("GET", "/companies"),
    ("POST", "/companies"),
    ("PUT", "/companies"),
    ("GET", "/companies/{company_id}"),
    ("DELETE", "/companies/{company_id}"),
    ("PUT", "/companies/{company_id}/admin"),
    ("POST", "/companies/validate"),
    ("POST", "/companies/validate/{field}"),
    ("GET", "/investments"),
    ("POST", "/investments"),
    ("PUT", "/investments"),
    ("GET", "/investments/{investment_id}"),
    ("DELETE", "/investments/{investment_id}"),
    ("GET", "/investments/{investment_id}/performance"),
    ("GET", "/investors"),
    ("POST", "/investors"),
    ("GET", "/investors/{user_id}"),
    ("POST", "/investors/{user_id}/approve"),
    ("POST", "/investors/{user_id}/reject"),
    ("POST", "/investors/{user_id}/deactivate"),
    ("GET", "/investors/{user_id}/investments"),
    ("POST", "/investors/{user_id}/investments"),
    ("POST", "/investors/{user_id}/investments/{subscription_id}/withdraw"),
    ("GET", "/dashboard/metrics"),
    ("GET", "/dashboard/superadmin"),
    ("GET", "/dashboard/admin/{company_id}"),
    ("GET", "/dashboard/investor/{user_id}"),
    ("GET", "/dashboard/salesman"),
    ("GET", "/demo/metrics"),
    ("GET", "/demo/investments"),
    ("GET", "/demo/portfolio/{user_id}"),
    ("GET", "/demo/performance/{investment_id}"),
)

CheckResult = Tuple[bool, str]


def check_files(package_dir: Path = PACKAGE_DIR) -> CheckResult:
    missing = [name for name in REQUIRED_FILES if not (package_dir / name).is_file()]
    if missing:
        return False, f"missing source files: {', '.join(missing)}"
    return True, f"{len(REQUIRED_FILES)} source files present"


def check_import() -> CheckResult:
    try:
        importlib.import_module("investpro.main")
    except Exception as exc:
        return False, f"investpro.main failed to import: {type(exc).__name__}: {exc}"
    return True, "application imports"


def check_routes() -> CheckResult:
    from investpro.core.config import settings
    from investpro.main import app

    registered = set()
    for route in app.routes:
        for method in getattr(route, "methods", None) or ():
            registered.add((method, route.path))

    missing = [
        f"{method} {path}"
        for method, path in EXPECTED_ROUTES
        if (method, settings.API_V1_STR + path) not in registered
    ]
    if missing:
        return False, f"routes not registered: {', '.join(missing)}"
    return True, f"{len(EXPECTED_ROUTES)} API routes registered"


CHECKS: List[Tuple[str, Callable[[], CheckResult]]] = [
    ("files", check_files),
    ("import", check_import),
    ("routes", check_routes),
]


def run_checks() -> List[Tuple[str, bool, str]]:
    """Run the checks in order; route checking is skipped if the import failed."""
    results: List[Tuple[str, bool, str]] = []
    for name, check in CHECKS:
        if name == "routes" and any(not ok for n, ok, _ in results if n == "import"):
            results.append((name, False, "skipped: application did not import"))
            continue
        ok, message = check()
        results.append((name, ok, message))
    return results


def main() -> int:
    results = run_checks()
    for name, ok, message in results:
        print(f"[{'PASS' if ok else 'FAIL'}] {name}: {message}")
    failed = sum(1 for _, ok, _ in results if not ok)
    if failed:
        print(f"{failed} check(s) failed")
        return 1
    print("All checks passed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
