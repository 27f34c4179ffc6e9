"""
Package-manager and framework detection from ``package.json`` and lockfiles.

Frameworks are matched by dependency name in FRAMEWORK_CANDIDATES order;
the package manager comes from the ``packageManager`` field, then from the
first lockfile found.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

UNKNOWN_FRAMEWORK = "Unknown"
UNKNOWN_MANAGER = "unknown"

KNOWN_MANAGERS = ("pnpm", "yarn", "npm", "bun")

# (framework name, dependency names)
FRAMEWORK_CANDIDATES: list[tuple[str, list[str]]] = [
    ("Next.js", ["next"]),
    ("Nuxt", ["nuxt", "@nuxt/kit"]),
    ("Vite", ["vite"]),
    ("Angular", ["@angular/core"]),
    ("SvelteKit", ["@sveltejs/kit"]),
    ("Astro", ["astro"]),
    ("Gatsby", ["gatsby"]),
    ("Remix", ["@remix-run/dev", "@remix-run/node"]),
    ("Vue CLI", ["@vue/cli-service"]),
    ("Create React App", ["react-scripts"]),
    ("Expo", ["expo"]),
]

# (lockfile, manager) in priority order
LOCKFILE_CANDIDATES: list[tuple[str, str]] = [
    ("pnpm-lock.yaml", "pnpm"),
    ("pnpm-lock.yml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
    ("npm-shrinkwrap.json", "npm"),
    ("bun.lockb", "bun"),
]

DEPENDENCY_SECTIONS = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)

_VERSION_PREFIX = re.compile(r"^[\^~><=\s]*")
_VERSION_CORE = re.compile(r"(\d+\.[\dA-Za-z.-]+(?:\.[\dA-Za-z.-]+)?)")


@dataclass(frozen=True)
class FrameworkInfo:
    name: str
    version: str | None = None


@dataclass(frozen=True)
class ManagerResult:
    package_manager: str
    framework: FrameworkInfo

    def to_dict(self) -> dict:
        return {
            "packageManager": self.package_manager,
            "framework": {"name": self.framework.name, "version": self.framework.version},
        }


def load_manifest(root: Path) -> dict | None:
    """Parsed ``package.json``, or None if it is missing or unreadable."""
    path = root / "package.json"
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.debug("No usable package.json at %s: %s", path, exc)
        return None
    return data if isinstance(data, dict) else None


def aggregate_dependencies(manifest: dict | None) -> dict[str, str]:
    deps: dict[str, str] = {}
    if not manifest:
        return deps
    for section in DEPENDENCY_SECTIONS:
        entries = manifest.get(section)
        if not isinstance(entries, dict):
            continue
        for name, version in entries.items():
            deps.setdefault(name, str(version))
    return deps


def normalize_version(version: str) -> str | None:
    if not version:
        return None
    if version.startswith("workspace:"):
        return version[len("workspace:"):] or None

    cleaned = _VERSION_PREFIX.sub("", version, count=1)
    m = _VERSION_CORE.search(cleaned)
    return m.group(1) if m else (cleaned or None)


def detect_framework(dependencies: dict[str, str]) -> FrameworkInfo | None:
    for name, packages in FRAMEWORK_CANDIDATES:
        match = next((pkg for pkg in packages if pkg in dependencies), None)
        if match:
            return FrameworkInfo(name=name, version=normalize_version(dependencies[match]))
    return None


def parse_package_manager_field(value) -> str | None:
    if not value or not isinstance(value, str):
        return None
    name = value.split("@")[0]
    return name if name in KNOWN_MANAGERS else None


def detect_package_manager(root: Path, manifest: dict | None) -> str:
    from_field = parse_package_manager_field((manifest or {}).get("packageManager"))
    if from_field:
        return from_field

    for filename, manager in LOCKFILE_CANDIDATES:
        if (root / filename).exists():
            return manager

    return UNKNOWN_MANAGER


def detect_manager(cwd: str | Path = ".") -> ManagerResult:
    root = Path(cwd).resolve()
    manifest = load_manifest(root)
    framework = detect_framework(aggregate_dependencies(manifest))

    return ManagerResult(
        package_manager=detect_package_manager(root, manifest),
        framework=framework or FrameworkInfo(name=UNKNOWN_FRAMEWORK),
    )
