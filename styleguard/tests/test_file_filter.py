"""
Tests for source file collection.
"""

from styleguard.engine.file_filter import clear_caches, collect_files, is_excluded_path, matches_exclude


class TestFileFilter:
    """Which files become source units."""

    def setup_method(self):
        clear_caches()

    def _touch(self, root, relative):
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")
        return path

    def test_collects_supported_extensions_sorted(self, tmp_path):
        for name in ["src/b.tsx", "src/a.ts", "src/c.js", "src/readme.md", "src/types.d.ts"]:
            self._touch(tmp_path, name)
        files = collect_files([str(tmp_path)])
        assert [f.rsplit("/", 1)[-1] for f in files] == ["a.ts", "b.tsx", "c.js"]

    def test_module_typescript_extensions(self, tmp_path):
        for name in ["lib/a.mts", "lib/b.cts", "lib/c.d.mts"]:
            self._touch(tmp_path, name)
        files = collect_files([str(tmp_path)])
        assert [f.rsplit("/", 1)[-1] for f in files] == ["a.mts", "b.cts"]

    def test_vendor_directories_are_skipped(self, tmp_path):
        self._touch(tmp_path, "node_modules/react/index.js")
        self._touch(tmp_path, "dist/app.js")
        kept = self._touch(tmp_path, "src/app.tsx")
        assert collect_files([str(tmp_path)]) == [str(kept.absolute())]

    def test_user_exclude_globs(self, tmp_path):
        self._touch(tmp_path, "src/Button.stories.tsx")
        kept = self._touch(tmp_path, "src/Button.tsx")
        assert collect_files([str(tmp_path)], exclude=["*.stories.tsx"]) == [str(kept.absolute())]

    def test_explicit_files_and_duplicates(self, tmp_path):
        path = self._touch(tmp_path, "a.ts")
        files = collect_files([str(path), str(path), str(tmp_path)])
        assert files == [str(path.absolute())]

    def test_missing_path_is_ignored(self, tmp_path):
        assert collect_files([str(tmp_path / "missing")]) == []

    def test_excluded_path_helpers(self):
        assert is_excluded_path("/repo/node_modules/x.js")
        assert is_excluded_path("/repo/src/index.d.ts")
        assert not is_excluded_path("/repo/src/index.ts")
        assert matches_exclude("/repo/src/gen/api.ts", ["*/gen/*"])
