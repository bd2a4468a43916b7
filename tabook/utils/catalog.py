from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import yaml

from tabook.models.booking import DISCIPLINES, ASSISTANCE_FORMATS

# Справочник программ, факультетов и дисциплин
CATALOG_PATH = Path(__file__).resolve().parents[1] / "catalog" / "reference.yaml"


class CatalogError(Exception):
    """Исключение при проблемах со справочником."""


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Читает YAML и возвращает dict. Бросает CatalogError при ошибке."""
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise CatalogError(f"Ошибка чтения YAML {path}: {e}") from e
    if not isinstance(data, dict):
        raise CatalogError(f"Формат YAML должен быть объектом (mapping): {path}")
    return data


def _options(data: Dict[str, Any], key: str, allowed: tuple, path: Path) -> List[Dict[str, str]]:
    items = data.get(key) or []
    values = [str(i.get("value", "")).strip() for i in items if isinstance(i, dict)]
    if sorted(values) != sorted(allowed):
        raise CatalogError(f"{path}: '{key}' должен содержать ровно {sorted(allowed)}")
    return [{"value": str(i["value"]).strip(), "label": str(i.get("label") or i["value"])} for i in items]


def _names(data: Dict[str, Any], key: str, path: Path) -> List[str]:
    items = data.get(key) or []
    if not isinstance(items, list):
        raise CatalogError(f"{path}: '{key}' должен быть массивом")
    return sorted({str(x).strip() for x in items if str(x).strip()})


@lru_cache(maxsize=None)
def load_reference(path: Path | None = None) -> Dict[str, Any]:
    """
    Загружает справочник и возвращает:
    { disciplines: [{value, label}], assistance_formats: [{value, label}],
      faculties: [str], programs: [str] }
    Файл читается один раз на каждый путь, результат общий: не изменять.
    """
    path = Path(path) if path else CATALOG_PATH
    data = _load_yaml(path)
    return {
        "disciplines": _options(data, "disciplines", DISCIPLINES, path),
        "assistance_formats": _options(data, "assistance_formats", ASSISTANCE_FORMATS, path),
        "faculties": _names(data, "faculties", path),
        "programs": _names(data, "programs", path),
    }


@lru_cache(maxsize=None)
def discipline_labels(path: Path | None = None) -> Dict[str, str]:
    return {d["value"]: d["label"] for d in load_reference(path)["disciplines"]}

