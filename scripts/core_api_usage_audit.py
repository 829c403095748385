from __future__ import annotations

"""Audit Core API endpoint usage across the codebase.

This utility scans all source files for Core API path strings and verifies
that each one matches an endpoint registered in the catalog defined within
`terminal_sdk/core_api`. The catalog already lists every supported Core
path; other parts of the application should not invent new endpoints
without updating that canonical source.
"""

import logging
import os
import re
import sys
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple


# Allow imports from the repository root when executed as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from terminal_sdk.config import LOG_LEVEL
from terminal_sdk.core_api.endpoints import EndpointCatalog, get_default_catalog

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parent.parent
CANONICAL_ROOT = REPO_ROOT / "terminal_sdk" / "core_api"

# File extensions we treat as source for endpoint usage
CODE_EXTENSIONS = {".py", ".go", ".ts", ".tsx", ".js", ".sh"}

ENDPOINT_PATTERN = re.compile(r"/api/v1(?:/[A-Za-z0-9._{}%\-/?=&]+)?")


def should_skip_dir(path: Path) -> bool:
    """Return True if directory should be excluded from the scan."""
    skip_names = {
        ".git",
        "node_modules",
        "dist",
        "build",
        "__pycache__",
        # Tests reference unregistered paths on purpose
        "tests",
    }
    return path.name in skip_names


def extract_endpoints_from_file(path: Path) -> List[str]:
    """Extract all Core API path strings from a file."""
    try:
        text = path.read_text(encoding="utf-8", errors="ignore")
    except OSError:
        return []
    return ENDPOINT_PATTERN.findall(text)


def walk_code_files(base: Path) -> Iterable[Path]:
    """Yield all source files we want to scan."""
    for root, dirs, files in os.walk(base):
        # Remove directories we want to skip from traversal
        dirs[:] = [d for d in dirs if not should_skip_dir(Path(d))]
        for filename in files:
            path = Path(root) / filename
            if path.suffix.lower() not in CODE_EXTENSIONS:
                continue
            yield path


def is_canonical(catalog: EndpointCatalog, endpoint: str) -> bool:
    """Return True if the reference matches a catalog endpoint.

    Query strings are only part of a few templates; for the rest, the query
    a caller appends is not part of the path.
    """
    if catalog.match(endpoint) is not None:
        return True
    path, sep, _ = endpoint.partition("?")
    return bool(sep) and catalog.match(path) is not None


def audit_endpoints(
    base: Path = REPO_ROOT,
    catalog: Optional[EndpointCatalog] = None,
    canonical_root: Path = CANONICAL_ROOT,
) -> Tuple[EndpointCatalog, Dict[Path, List[str]]]:
    """Run the audit and return the catalog and violations."""
    catalog = catalog if catalog is not None else get_default_catalog()
    violations: Dict[Path, List[str]] = defaultdict(list)

    for path in walk_code_files(base):
        # Skip the canonical directory itself to avoid self-reporting
        if canonical_root in path.parents:
            continue

        for endpoint in extract_endpoints_from_file(path):
            if not is_canonical(catalog, endpoint):
                logger.debug(f"Non-canonical endpoint {endpoint} in {path}")
                violations[path].append(endpoint)

    return catalog, dict(violations)


def format_report(
    catalog: EndpointCatalog,
    violations: Dict[Path, List[str]],
    base: Path = REPO_ROOT,
) -> str:
    """Create a human-friendly report of the audit."""
    lines = [
        "# Core API Endpoint Audit",
        "",
        "This report compares every Core API path reference across the codebase",
        "against the endpoint catalog defined in `terminal_sdk/core_api`.",
        "",
        f"- Catalog endpoints: {len(catalog)}",
        f"- Files scanned: {sum(1 for _ in walk_code_files(base))}",
        f"- Files with non-canonical endpoints: {len(violations)}",
        "",
    ]

    if not violations:
        lines.append("## Status\n\nAll scanned files use endpoints defined in the catalog.")
        return "\n".join(lines)

    lines.append("## Non-canonical Endpoint References\n")
    for path, endpoints in sorted(violations.items()):
        lines.append(f"### {path.relative_to(base)}")
        for endpoint in sorted(set(endpoints)):
            lines.append(f"- `{endpoint}`")
        lines.append("")
    return "\n".join(lines)


def main() -> int:
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    catalog, violations = audit_endpoints()
    report = format_report(catalog, violations)
    output_path = REPO_ROOT / "docs" / "CORE_API_USAGE_REPORT.md"
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(report, encoding="utf-8")
    logger.info(f"Wrote {output_path}")
    print(report)
    return 1 if violations else 0


if __name__ == "__main__":
    raise SystemExit(main())
