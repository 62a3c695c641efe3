"""Tests for chimera.services.tree — nested tree building."""

from chimera.models.schemas import GitHubFile
from chimera.services.tree import build_tree, flatten_tree, get_file_paths

# ── build_tree ───────────────────────────────────────────────────────────────


class TestBuildTree:
    def test_empty(self):
        assert build_tree([]) == []
        assert build_tree(None) == []

    def test_directories_first_then_names(self, sample_files):
        tree = build_tree(sample_files)
        assert [n.name for n in tree] == ["docs", "src", "Dockerfile", "package.json", "README.md"]

    def test_nested_levels_sorted(self, sample_files):
        tree = build_tree(sample_files)
        src = next(n for n in tree if n.name == "src")
        assert [n.name for n in src.children] == ["components", "app.ts", "utils.ts"]
        assert src.children[0].children[0].path == "src/components/Button.tsx"

    def test_missing_parent_synthesised(self):
        tree = build_tree([GitHubFile(path="a/b/c.txt", type="blob")])
        assert tree[0].name == "a"
        assert tree[0].type == "tree"
        assert tree[0].children[0].path == "a/b"
        assert tree[0].children[0].children[0].type == "blob"

    def test_deterministic_regardless_of_input_order(self, sample_files):
        forward = build_tree(sample_files)
        backward = build_tree(list(reversed(sample_files)))
        assert flatten_tree(forward) == flatten_tree(backward)

    def test_case_insensitive_order(self):
        files = [GitHubFile(path=p, type="blob") for p in ["b.txt", "A.txt", "a.txt"]]
        assert [n.name for n in build_tree(files)] == ["a.txt", "A.txt", "b.txt"]

    def test_lowercase_before_uppercase_on_tie(self):
        files = [GitHubFile(path=p, type="blob") for p in ["README", "readme", "ReadMe"]]
        assert [n.name for n in build_tree(files)] == ["readme", "ReadMe", "README"]

    def test_leaf_type_preserved(self):
        tree = build_tree([GitHubFile(path="vendor/lib", type="commit")])
        assert tree[0].children[0].type == "commit"


# ── get_file_paths / flatten_tree ────────────────────────────────────────────


class TestPaths:
    def test_get_file_paths_keeps_input_order(self, sample_files):
        assert get_file_paths(sample_files)[:2] == ["src/utils.ts", "README.md"]

    def test_get_file_paths_empty(self):
        assert get_file_paths(None) == []

    def test_flatten_depth_first(self, sample_files):
        assert flatten_tree(build_tree(sample_files)) == [
            "docs",
            "docs/guide.md",
            "src",
            "src/components",
            "src/components/Button.tsx",
            "src/app.ts",
            "src/utils.ts",
            "Dockerfile",
            "package.json",
            "README.md",
        ]
