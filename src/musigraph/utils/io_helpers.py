import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

from pydantic import BaseModel


def load_jsonl(file_path: Path) -> List[Dict[str, Any]]:
    """
    Reads a JSONL file and returns a list of dictionaries.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    data = []
    with open(file_path, "r", encoding="utf-8") as f:
        for line in f:
            if line.strip():
                data.append(json.loads(line))
    return data


def save_to_jsonl(data: Iterable[Dict[str, Any]], file_path: Path, mode: str = "w") -> int:
    """
    Saves dictionaries to a file in JSONL format, creating parent folders.

    Args:
        data: The dictionary records to save.
        file_path: The Path object for the output file.
        mode: The file open mode ('w' for write/overwrite, 'a' for append).

    Returns:
        The number of records written.
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    with open(file_path, mode, encoding="utf-8") as f:
        for record in data:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")
            written += 1
    return written


def save_models_to_jsonl(models: Iterable[BaseModel], file_path: Path) -> int:
    """Dumps pydantic models (JSON mode) one per line, overwriting the file."""
    return save_to_jsonl((model.model_dump(mode="json") for model in models), file_path)
