"""
Tests for the debate-wide source registry.

Run with: pytest tests/test_registry.py -v
"""

from dialectica.services.debate import Source, SourceRegistry
from dialectica.services.debate.registry import NO_SOURCES_SENTINEL


def test_numbers_assigned_in_first_seen_order():
    registry = SourceRegistry()

    assert registry.resolve("https://a", "A") == 1
    assert registry.resolve("https://b", "B") == 2
    assert registry.resolve("https://c", "C") == 3
    assert registry.next_number == 4
    assert len(registry) == 3


def test_repeated_url_keeps_its_number():
    registry = SourceRegistry()
    registry.resolve("https://a", "A")
    registry.resolve("https://b", "B")

    assert registry.resolve("https://a", "A again") == 1
    assert registry.next_number == 3, "Reusing a URL must not consume a number"
    assert len(registry) == 2


def test_first_title_wins():
    registry = SourceRegistry()
    registry.resolve("https://a", "Original title")
    registry.resolve("https://a", "Different title")

    assert registry.get(1).title == "Original title"


def test_urls_are_trimmed():
    registry = SourceRegistry()
    registry.resolve("  https://a  ", " A ")

    assert registry.number_for("https://a") == 1
    assert "https://a" in registry
    assert registry.resolve("https://a", "A") == 1
    assert registry.get(1) == Source(number=1, title="A", url="https://a")


def test_mapping_is_bijective():
    registry = SourceRegistry()
    urls = ["https://a", "https://b", "https://a", "https://c", "https://b"]
    for url in urls:
        registry.resolve(url, url.upper())

    numbers = [s.number for s in registry.sources()]
    registry_urls = [s.url for s in registry.sources()]

    assert numbers == [1, 2, 3]
    assert len(set(registry_urls)) == len(registry_urls)
    for source in registry.sources():
        assert registry.number_for(source.url) == source.number


def test_lookups_for_unknown_entries():
    registry = SourceRegistry()

    assert registry.number_for("https://missing") is None
    assert registry.get(1) is None
    assert "https://missing" not in registry


def test_reference_list_sentinel_when_empty():
    assert SourceRegistry().format_reference_list() == NO_SOURCES_SENTINEL


def test_reference_list_sorted_by_number():
    registry = SourceRegistry()
    registry.resolve("https://example.org/solar", "Solar outlook")
    registry.resolve("https://example.org/storage", "Grid storage costs")

    assert registry.format_reference_list() == (
        "[1] Solar outlook - https://example.org/solar\n"
        "[2] Grid storage costs - https://example.org/storage"
    )


def test_registries_are_independent():
    """Each debate gets its own numbering."""
    first = SourceRegistry()
    second = SourceRegistry()

    first.resolve("https://a", "A")
    first.resolve("https://b", "B")

    assert second.resolve("https://b", "B") == 1
    assert first.number_for("https://b") == 2
