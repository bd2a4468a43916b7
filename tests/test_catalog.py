import pytest

from tabook.utils import catalog


@pytest.fixture
def fresh_cache():
    catalog.load_reference.cache_clear()
    catalog.discipline_labels.cache_clear()
    yield
    catalog.load_reference.cache_clear()
    catalog.discipline_labels.cache_clear()


def test_reference_is_read_once(fresh_cache, monkeypatch):
    reads = []
    original = catalog._load_yaml

    def counting_load(path):
        reads.append(path)
        return original(path)

    monkeypatch.setattr(catalog, "_load_yaml", counting_load)

    labels = catalog.discipline_labels()
    assert labels["machine_learning"] == "Машинное обучение"
    assert catalog.discipline_labels() is labels
    catalog.load_reference()
    assert len(reads) == 1


def test_disciplines_endpoint_does_not_reread_catalog(
    fresh_cache, monkeypatch, client, make_teacher, make_student, add_booking, headers,
):
    student = make_student()
    add_booking(student, make_teacher())
    reads = []
    original = catalog._load_yaml
    monkeypatch.setattr(catalog, "_load_yaml", lambda path: reads.append(path) or original(path))

    for _ in range(3):
        r = client.get(f"/api/students/{student.id}/disciplines", headers=headers(student))
        assert r.status_code == 200
    assert len(reads) == 1


def test_catalog_with_wrong_disciplines_rejected(fresh_cache, tmp_path):
    path = tmp_path / "reference.yaml"
    path.write_text(
        "disciplines:\n  - {value: history, label: История}\n"
        "assistance_formats:\n  - {value: money}\n  - {value: credits}\n",
        encoding="utf-8",
    )
    with pytest.raises(catalog.CatalogError):
        catalog.load_reference(path)


def test_broken_yaml_rejected(fresh_cache, tmp_path):
    path = tmp_path / "reference.yaml"
    path.write_text("disciplines: [unclosed", encoding="utf-8")
    with pytest.raises(catalog.CatalogError):
        catalog.load_reference(path)
