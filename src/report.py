"""Rendering and export of counted dependency trees."""

import csv
import json
import logging
import sys

from counting.models import calculate_total, flatten

logger = logging.getLogger(__name__)

EXTRA_PADDING = 2
INDENT = "  "


def _name_width(root):
    """Width of the dependency column: the widest name plus its indent."""
    width = len(str(root.dependency))
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        width = max(width, len(INDENT * depth) + len(str(node.dependency)))
        stack.extend((child, depth + 1) for child in node.dependents)
    return width + EXTRA_PADDING


def render_totals(root):
    """Return the totals block for the root dependency."""
    total = calculate_total(root)
    return (
        f"{root.dependency} TOTALS:\n"
        f" Methods: {total.methods}\n"
        f"  Fields: {total.fields}\n"
    )


def render_table(root):
    """Return the indented per-dependency table."""
    width = _name_width(root)
    lines = [f"{'Dependency':<{width}}Methods  Fields"]

    def _dump(node, indent):
        name_width = width - len(indent)
        lines.append(f"{indent}{str(node.dependency):<{name_width}}  {node.own_methods:5d}   {node.own_fields:5d}")
        for child in node.dependents:
            _dump(child, indent + INDENT)

    _dump(root, "")
    return "\n".join(lines) + "\n"


def print_report(root, stream=None):
    """Print totals followed by the dependency table.

    Args:
        root (CountNode): Counted tree, possibly partial.
        stream: Output stream. Defaults to stdout.
    """
    stream = stream if stream is not None else sys.stdout
    stream.write(render_totals(root))
    stream.write("\n")
    stream.write(render_table(root))


def _node_to_dict(node):
    return {
        "dependency": str(node.dependency),
        "group": node.dependency.group,
        "artifact": node.dependency.artifact,
        "version": node.dependency.version,
        "location": node.location,
        "methods": node.own_methods,
        "fields": node.own_fields,
        "dependents": [_node_to_dict(child) for child in node.dependents],
    }


def to_dict(root):
    """Serialize a counted tree and its totals to plain data."""
    total = calculate_total(root)
    return {
        "root": _node_to_dict(root),
        "totals": {"methods": total.methods, "fields": total.fields},
    }


def export_json(root, path):
    """Exports the counted tree to a JSON file.

    Args:
        root (CountNode): Counted tree.
        path (str): File path to export the JSON.

    Raises:
        OSError: If the file cannot be written.
    """
    with open(path, "w", encoding="utf-8") as file:
        json.dump(to_dict(root), file, ensure_ascii=False, indent=4)
    logger.info("JSON file has been successfully exported at: %s", path)


def export_csv(root, path):
    """Exports one row per unique dependency, then a totals row, to a CSV file.

    Args:
        root (CountNode): Counted tree.
        path (str): File path to export the CSV.

    Raises:
        OSError: If the file cannot be written.
    """
    headers = ["Dependency", "Group", "Artifact", "Version", "Methods", "Fields", "Location"]
    rows = [headers]
    for dep, node in flatten(root).items():
        rows.append([
            str(dep),
            dep.group,
            dep.artifact,
            dep.version,
            node.own_methods,
            node.own_fields,
            node.location,
        ])
    total = calculate_total(root)
    rows.append(["TOTAL", "", "", "", total.methods, total.fields, ""])
    with open(path, "w", newline="", encoding="utf-8") as file:
        export = csv.writer(file)
        export.writerows(rows)
    logger.info("CSV file has been successfully exported at: %s", path)
