"""
Repository Tree - Turns GitHub's flat recursive listing into a nested tree.
"""

from typing import Dict, Iterable, List, Optional

from chimera.models.schemas import GitHubFile, TreeNode


def _sort_key(node: TreeNode):
    # Directories first, then case-insensitive names; on a tie lowercase
    # sorts before uppercase, as a locale compare does.
    return (0 if node.type == "tree" else 1, node.name.casefold(), node.name.swapcase())


def build_tree(files: Optional[Iterable[GitHubFile]]) -> List[TreeNode]:
    """
    Build a nested tree from flat GitHub tree entries.

    Missing intermediate directories are synthesised as `tree` nodes and
    every level is sorted directories-first, then by name.
    """
    if not files:
        return []

    root = TreeNode(name="root", path="", type="tree")
    nodes: Dict[str, TreeNode] = {"": root}

    for file in files:
        if not file.path:
            continue
        parts = file.path.split("/")
        parent_path = ""
        for index, part in enumerate(parts):
            current_path = f"{parent_path}/{part}" if parent_path else part
            if current_path not in nodes:
                node = TreeNode(
                    name=part,
                    path=current_path,
                    type=file.type if index == len(parts) - 1 else "tree",
                )
                nodes[parent_path].children.append(node)
                nodes[current_path] = node
            parent_path = current_path

    for node in nodes.values():
        if node.children:
            node.children.sort(key=_sort_key)

    return root.children


def get_file_paths(files: Optional[Iterable[GitHubFile]]) -> List[str]:
    """Return the non-empty paths of the listing, in input order."""
    if not files:
        return []
    return [f.path for f in files if f.path]


def flatten_tree(nodes: List[TreeNode]) -> List[str]:
    """Depth-first listing of node paths in tree order."""
    paths: List[str] = []
    for node in nodes:
        paths.append(node.path)
        paths.extend(flatten_tree(node.children))
    return paths
