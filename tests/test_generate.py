"""Tests for roost.generate — end-to-end route module generation."""

import importlib.util
import logging
import textwrap
from pathlib import Path

import pytest

from roost.config import GeneratorConfig
from roost.discovery import RouteDeclaration
from roost.errors import (
    DuplicatePath,
    InvalidHandlerSource,
    InvalidPath,
    NoTopLevelRoute,
    UnreachableRoute,
)
from roost.generate import (
    RUNTIME_IMPORT,
    build_imports,
    collect_descriptors,
    generate,
    load_route_tree,
    render_module,
)
from roost.markers import RouteConfig
from roost.routing.descriptor import InstantiationMode, RouteDescriptor
from roost.routing.tree import build_route_tree

EXPECTED_MODULE = '''\
"""Route configuration generated by roost. Do not edit.

Regenerate with ``roost generate``.
"""

from roost.markers import RouteConfig, shared
from app import Shell
from app.pages.home import Home, Settings

ROUTES: list[RouteConfig] = [
    RouteConfig(path='/', construct=shared(Shell), routes=[
        RouteConfig(path='/home', construct=Home, routes=[
            RouteConfig(path='/settings', name='settings', construct=Settings),
        ]),
    ]),
]
'''


def _write(root: Path, relative: str, source: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(source), encoding="utf-8")


def _declaration(path: str, handler: str, **kwargs: object) -> RouteDeclaration:
    return RouteDeclaration(path=path, handler=handler, module="app.pages", **kwargs)  # type: ignore[arg-type]


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    root = tmp_path / "app"
    _write(
        root,
        "__init__.py",
        """
        from roost import route

        @route("/", shared=True)
        class Shell:
            pass
        """,
    )
    _write(
        root,
        "pages/home.py",
        """
        from roost import route

        @route("/home")
        class Home:
            pass

        @route("/home/settings", name="settings")
        class Settings:
            pass
        """,
    )
    return root


class TestCollectDescriptors:
    def test_builds_descriptors(self) -> None:
        descriptors = collect_descriptors(
            [_declaration("/", "Shell", shared=True), _declaration("/a", "A", name="a")]
        )
        assert [d.path for d in descriptors] == ["/", "/a"]
        assert descriptors[0].mode is InstantiationMode.SHARED
        assert descriptors[1].mode is InstantiationMode.FRESH
        assert descriptors[1].name == "a"
        assert descriptors[1].module == "app.pages"

    def test_logs_every_failure_raises_first(self, caplog: pytest.LogCaptureFixture) -> None:
        declarations = [
            _declaration("", "First", location="pages.py:1"),
            _declaration("/ok", "Ok"),
            _declaration("?q", "Second", location="pages.py:9"),
        ]
        with caplog.at_level(logging.ERROR, logger="roost.generate"):
            with pytest.raises(InvalidPath) as exc_info:
                collect_descriptors(declarations)

        assert exc_info.value.path == ""
        messages = [record.getMessage() for record in caplog.records]
        assert len(messages) == 2
        assert "First" in messages[0]
        assert "pages.py:9" in messages[1]


class TestBuildImports:
    def test_groups_by_module_in_first_seen_order(self) -> None:
        descriptors = [
            RouteDescriptor.create("/", handler="Shell", module="app"),
            RouteDescriptor.create("/a", handler="A", module="app.pages"),
            RouteDescriptor.create("/b", handler="B", module="app"),
            RouteDescriptor.create("/c", handler="C", module="app.pages"),
        ]
        assert build_imports(descriptors) == [
            RUNTIME_IMPORT,
            "from app import Shell, B",
            "from app.pages import A, C",
        ]

    def test_skips_unknown_module(self) -> None:
        descriptors = [RouteDescriptor.create("/", handler="Shell")]
        assert build_imports(descriptors) == [RUNTIME_IMPORT]

    def test_same_name_from_two_modules_rejected(self) -> None:
        descriptors = [
            RouteDescriptor.create("/", handler="Page", module="app.home"),
            RouteDescriptor.create("/admin", handler="Page", module="app.admin"),
        ]
        with pytest.raises(InvalidHandlerSource, match="clashes with Page") as exc_info:
            build_imports(descriptors)
        assert exc_info.value.location == "app.admin"

    def test_same_handler_twice_in_one_module(self) -> None:
        descriptors = [
            RouteDescriptor.create("/", handler="Page", module="app"),
            RouteDescriptor.create("/again", handler="Page", module="app"),
        ]
        assert build_imports(descriptors) == [RUNTIME_IMPORT, "from app import Page"]

    @pytest.mark.parametrize("handler", ["RouteConfig", "shared"])
    def test_reserved_name_rejected(self, handler: str) -> None:
        descriptors = [RouteDescriptor.create("/", handler=handler, module="app")]
        with pytest.raises(InvalidHandlerSource, match="reserved"):
            build_imports(descriptors)


class TestRenderModule:
    def test_module_text(self) -> None:
        descriptors = [
            RouteDescriptor.create("/", handler="Shell", module="app"),
            RouteDescriptor.create("/about", handler="About", module="app"),
        ]
        roots = build_route_tree(descriptors)
        text = render_module(roots, build_imports(descriptors), variable="PAGES")

        assert text.startswith('"""Route configuration generated by roost.')
        assert "from app import Shell, About\n" in text
        assert "PAGES: list[RouteConfig] = [\n" in text
        assert text.endswith("]\n")


class TestLoadRouteTree:
    def test_builds_tree(self, app_dir: Path) -> None:
        tree = load_route_tree(GeneratorConfig(source_dir=app_dir, package="app"))

        assert tree is not None
        assert [root.handler for root in tree.roots] == ["Shell"]
        assert tree.route_count == 3
        assert [route.handler for route in tree.routes] == ["Shell", "Home", "Settings"]
        assert tree.dropped == ()

    def test_no_routes(self, tmp_path: Path) -> None:
        assert load_route_tree(GeneratorConfig(source_dir=tmp_path, package="app")) is None

    def test_dropped_routes_warn(
        self, app_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        _write(app_dir, "orphan.py", '@route("/lost/page")\nclass Lost:\n    pass\n')
        with caplog.at_level(logging.WARNING, logger="roost.generate"):
            tree = load_route_tree(GeneratorConfig(source_dir=app_dir, package="app"))

        assert tree is not None
        assert [route.path for route in tree.dropped] == ["/lost/page"]
        assert "/lost/page" in caplog.text

    def test_strict_raises_on_dropped(self, app_dir: Path) -> None:
        _write(app_dir, "orphan.py", '@route("/lost/page")\nclass Lost:\n    pass\n')
        with pytest.raises(UnreachableRoute) as exc_info:
            load_route_tree(GeneratorConfig(source_dir=app_dir, package="app", strict=True))
        assert exc_info.value.paths == ("/lost/page",)


class TestGenerate:
    def test_writes_module(self, app_dir: Path) -> None:
        result = generate(GeneratorConfig(source_dir=app_dir, package="app"))

        assert result is not None
        assert result.written is True
        assert result.routes == 3
        assert result.output == (app_dir / "routing" / "routes.py").resolve()
        assert result.output.read_text(encoding="utf-8") == EXPECTED_MODULE

    def test_second_run_is_unchanged(self, app_dir: Path) -> None:
        config = GeneratorConfig(source_dir=app_dir, package="app")
        first = generate(config)
        assert first is not None
        before = first.output.read_text(encoding="utf-8")

        second = generate(config)

        assert second is not None
        assert second.written is False
        assert second.output.read_text(encoding="utf-8") == before

    def test_custom_output_and_variable(self, app_dir: Path, tmp_path: Path) -> None:
        output = tmp_path / "out" / "generated_routes.py"
        generate(
            GeneratorConfig(source_dir=app_dir, package="app", output=output, variable="PAGES")
        )
        assert "PAGES: list[RouteConfig] = [" in output.read_text(encoding="utf-8")

    def test_no_routes_writes_nothing(self, tmp_path: Path) -> None:
        config = GeneratorConfig(source_dir=tmp_path, package="app")
        assert generate(config) is None
        assert not config.output_path.exists()

    def test_failure_writes_nothing(self, app_dir: Path) -> None:
        _write(app_dir, "dupe.py", '@route("/home")\nclass Again:\n    pass\n')
        config = GeneratorConfig(source_dir=app_dir, package="app")

        with pytest.raises(DuplicatePath):
            generate(config)
        assert not config.output_path.exists()

    def test_failure_keeps_previous_output(self, app_dir: Path) -> None:
        config = GeneratorConfig(source_dir=app_dir, package="app")
        generate(config)
        _write(app_dir, "dupe.py", '@route("/home")\nclass Again:\n    pass\n')

        with pytest.raises(DuplicatePath):
            generate(config)
        assert config.output_path.read_text(encoding="utf-8") == EXPECTED_MODULE

    def test_no_top_level_route(self, tmp_path: Path) -> None:
        _write(tmp_path, "pages.py", '@route("/a/b")\nclass Deep:\n    pass\n')
        with pytest.raises(NoTopLevelRoute):
            generate(GeneratorConfig(source_dir=tmp_path, package="app"))

    def test_dropped_routes_not_imported(self, app_dir: Path) -> None:
        _write(app_dir, "orphan.py", '@route("/lost/page")\nclass Lost:\n    pass\n')
        result = generate(GeneratorConfig(source_dir=app_dir, package="app"))

        assert result is not None
        assert result.dropped == ("/lost/page",)
        assert "Lost" not in result.output.read_text(encoding="utf-8")

    def test_generated_module_runs(
        self, app_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        result = generate(GeneratorConfig(source_dir=app_dir, package="app"))
        assert result is not None
        monkeypatch.syspath_prepend(str(app_dir.parent))
        for name in ("app", "app.pages", "app.pages.home", "app.routing"):
            monkeypatch.delitem(__import__("sys").modules, name, raising=False)

        spec = importlib.util.spec_from_file_location("_generated_routes", result.output)
        assert spec is not None
        assert spec.loader is not None
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        (shell,) = module.ROUTES
        assert isinstance(shell, RouteConfig)
        assert shell.construct() is shell.construct()
        (home,) = shell.routes
        assert home.path == "/home"
        assert home.construct() is not home.construct()
        (settings,) = home.routes
        assert settings.name == "settings"
        assert type(settings.construct()).__name__ == "Settings"

    def test_handler_name_clash_writes_nothing(self, app_dir: Path) -> None:
        _write(app_dir, "admin.py", '@route("/admin")\nclass Home:\n    pass\n')
        config = GeneratorConfig(source_dir=app_dir, package="app")

        with pytest.raises(InvalidHandlerSource, match="clashes"):
            generate(config)
        assert not config.output_path.exists()
