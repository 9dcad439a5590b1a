"""Tests for focus pool size."""

from pathsheet.config import get_settings
from pathsheet.game.character.base import with_changes
from pathsheet.game.systems.focus import class_grants_focus, has_focus_abilities, max_focus_points


def feats(*feat_ids):
    return [{"feat_id": feat_id, "level": 1, "source": "class"} for feat_id in feat_ids]


class TestFocusPoints:
    """One point for the class, one per focus feat, capped."""

    def test_non_focus_class(self, fighter, catalog):
        """A fighter without focus feats has no pool."""
        assert max_focus_points(fighter, catalog) == 0
        assert not has_focus_abilities(fighter, catalog)

    def test_focus_class_alone(self, bard, catalog):
        """A bard gets one point from the class."""
        assert max_focus_points(bard, catalog) == 1

    def test_class_and_two_feats(self, bard, catalog):
        """Bard plus two distinct focus feats: 1 + 2."""
        character = with_changes(bard, feats=feats("Qa8dHf2jKl6zSx0v", "wizard-focus-spell"))
        assert max_focus_points(character, catalog) == 3

    def test_capped_at_three(self, bard, catalog):
        """A third focus feat doesn't raise the pool past 3."""
        character = with_changes(
            bard, feats=feats("bard-muse", "wizard-focus-spell", "cleric-domain")
        )
        assert max_focus_points(character, catalog) == 3

    def test_same_feat_counted_once(self, bard, catalog):
        """An opaque id and its slug are the same feat."""
        character = with_changes(bard, feats=feats("Qa8dHf2jKl6zSx0v", "bard-muse"))
        assert max_focus_points(character, catalog) == 2

    def test_additional_focus_with_higher_cap(self, bard, catalog):
        """Additional-focus feats add beyond the per-feat points."""
        character = with_changes(
            bard, feats=feats("bard-muse", "cleric-domain", "monk-ki", "additional-focus")
        )
        assert max_focus_points(character, catalog, cap=10) == 5

    def test_cap_from_settings(self, bard, catalog, monkeypatch):
        """PATHSHEET_FOCUS_POINT_CAP changes the default cap."""
        character = with_changes(bard, feats=feats("bard-muse", "cleric-domain"))
        monkeypatch.setenv("PATHSHEET_FOCUS_POINT_CAP", "2")
        get_settings.cache_clear()
        try:
            assert max_focus_points(character, catalog) == 2
        finally:
            get_settings.cache_clear()

    def test_without_catalog(self, bard):
        """Slugs work without a catalog; the class is matched by name."""
        character = with_changes(bard, feats=feats("bard-muse"))
        assert max_focus_points(character) == 2


class TestFocusClasses:
    """Tests for class membership."""

    def test_catalogued_class(self, catalog):
        """Catalogued classes resolve through their display name."""
        assert class_grants_focus("bard", catalog)
        assert not class_grants_focus("fighter", catalog)

    def test_uncatalogued_class_by_name(self, catalog):
        """Classes missing from the catalog are compared by name."""
        assert class_grants_focus("oracle", catalog)
        assert not class_grants_focus("", catalog)
