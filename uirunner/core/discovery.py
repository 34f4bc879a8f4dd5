"""Test flow discovery."""

from __future__ import annotations

import logging
from pathlib import Path

from uirunner.core.errors import NoTestsFoundError, TestNotFoundError
from uirunner.models.test import FLOW_EXTENSIONS, Platform, TestSpec, spec_name

logger = logging.getLogger("uirunner.discovery")


class TestDiscovery:
    """Find YAML flow files to run."""

    __test__ = False

    def __init__(self, test_dir: Path, platform: Platform = Platform.ANDROID):
        """Initialize discovery.

        Args:
            test_dir: Directory holding *.yaml / *.yml flows
            platform: Platform the discovered specs target
        """
        self._test_dir = Path(test_dir)
        self._platform = platform

    @property
    def test_dir(self) -> Path:
        return self._test_dir

    def discover(self, test_filter: str | Path | None = None) -> list[TestSpec]:
        """Discover runnable test specs.

        Args:
            test_filter: Single flow to run. Looked up inside the test
                directory first, then as a literal path.

        Returns:
            Specs in directory order, or the single filtered spec

        Raises:
            TestNotFoundError: Filter given but no such file
            NoTestsFoundError: No filter and no flows in the test directory
        """
        if test_filter:
            path = self._resolve_filter(test_filter)
            logger.debug("Resolved %s -> %s", test_filter, path)
            return [TestSpec.from_path(path, self._platform)]

        specs = self.list_tests()
        if not specs:
            raise NoTestsFoundError(self._test_dir)

        logger.debug("Discovered %d test(s) in %s", len(specs), self._test_dir)
        return specs

    def list_tests(self) -> list[TestSpec]:
        """List flows in the test directory without raising.

        .yaml files come before .yml files, each group sorted by name.
        Spec names are unique: when login.yaml and login.yml both exist the
        second becomes login_yml, so their artifacts never share a path.
        """
        if not self._test_dir.is_dir():
            return []

        specs: list[TestSpec] = []
        seen: set[str] = set()
        for ext in FLOW_EXTENSIONS:
            for path in sorted(self._test_dir.glob(f"*{ext}")):
                if not path.is_file():
                    continue
                name = spec_name(path)
                if name in seen:
                    name = self._unique_name(f"{name}_{ext.lstrip('.')}", seen)
                    logger.debug("Name clash for %s, using %s", path.name, name)
                seen.add(name)
                specs.append(TestSpec(name=name, path=path, platform=self._platform))
        return specs

    @staticmethod
    def _unique_name(base: str, seen: set[str]) -> str:
        name = base
        counter = 2
        while name in seen:
            name = f"{base}_{counter}"
            counter += 1
        return name

    def _resolve_filter(self, test_filter: str | Path) -> Path:
        in_dir = self._test_dir / test_filter
        if in_dir.is_file():
            return in_dir

        literal = Path(test_filter)
        if literal.is_file():
            return literal

        raise TestNotFoundError(test_filter)
