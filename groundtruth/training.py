"""Training data formats shared by the server and the client.

Training data travels as a list of ``{"text": ..., "classes": [...]}`` entries,
either as JSON (``{"training_data": [...]}``) or as CSV where the first column
is the text and every remaining non-empty column is a class name.
"""

import csv
import io
from typing import Iterable, List, Optional


def parse_csv(content: str) -> List[dict]:
    """Parse CSV training data; blank lines are skipped."""
    entries = []
    for row in csv.reader(io.StringIO(content)):
        if not any(cell.strip() for cell in row):
            continue
        text = row[0].strip()
        classes = [cell.strip() for cell in row[1:] if cell.strip()]
        entries.append({"text": text, "classes": classes})
    return entries


def parse_json(data: dict) -> List[dict]:
    """Extract the training entries from a ``{"training_data": [...]}`` document."""
    if not isinstance(data, dict) or not isinstance(data.get("training_data"), list):
        raise ValueError("Expected a training_data array")

    entries = []
    for item in data["training_data"]:
        if not isinstance(item, dict):
            raise ValueError("Invalid training_data entry")
        classes = item.get("classes") or []
        if isinstance(classes, str):
            classes = [classes]
        entries.append({"text": item.get("text", ""), "classes": [str(c) for c in classes]})
    return entries


def merge_entries(entries: Iterable[dict]) -> dict:
    """
    Merge entries that share the same text and collect the distinct classes.

    Returns:
        {"classes": [name, ...], "text": [{"text": ..., "classes": [...]}, ...]}
        in first-seen order.
    """
    classes = []
    texts = {}
    for entry in entries:
        entry_classes = entry.get("classes") or []
        for name in entry_classes:
            if name not in classes:
                classes.append(name)

        text = entry.get("text")
        if not text:
            continue
        merged = texts.setdefault(text, {"text": text, "classes": []})
        for name in entry_classes:
            if name not in merged["classes"]:
                merged["classes"].append(name)

    return {"classes": classes, "text": list(texts.values())}


def to_csv(entries: Iterable[dict], all_classes: Optional[Iterable[str]] = None) -> str:
    """
    Write labelled entries as CSV.

    Entries without classes are left out. Classes from ``all_classes`` that no
    entry uses are written on a final row with an empty text column so they
    survive a round trip.
    """
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    used = []
    for entry in entries:
        entry_classes = entry.get("classes") or []
        if not entry_classes:
            continue
        writer.writerow([entry.get("text", "")] + list(entry_classes))
        used.extend(c for c in entry_classes if c not in used)

    unused = [c for c in (all_classes or []) if c not in used]
    if unused:
        writer.writerow([""] + unused)

    return out.getvalue()
