"""
Tests for the relationship integrity check
"""
from cmdb.database import CIRelationship
from cmdb.services import would_conflict


class TestWouldConflict:
    """Test direct reverse-edge detection"""

    def _edge(self, db_session, source, target, rel_type="depends_on", is_active=True):
        db_session.add(CIRelationship(
            source_ci_id=source.id,
            target_ci_id=target.id,
            type=rel_type,
            attributes={},
            is_active=is_active,
        ))
        db_session.commit()

    def test_reverse_edge_of_same_type_conflicts(self, db_session, make_ci):
        a, b = make_ci(), make_ci()
        self._edge(db_session, a, b)

        assert would_conflict(db_session, b.id, a.id, "depends_on") is True

    def test_same_direction_does_not_conflict(self, db_session, make_ci):
        a, b = make_ci(), make_ci()
        self._edge(db_session, a, b)

        assert would_conflict(db_session, a.id, b.id, "depends_on") is False

    def test_other_type_does_not_conflict(self, db_session, make_ci):
        a, b = make_ci(), make_ci()
        self._edge(db_session, a, b)

        assert would_conflict(db_session, b.id, a.id, "hosts") is False

    def test_inactive_edge_ignored(self, db_session, make_ci):
        a, b = make_ci(), make_ci()
        self._edge(db_session, a, b, is_active=False)

        assert would_conflict(db_session, b.id, a.id, "depends_on") is False

    def test_longer_cycles_not_detected(self, db_session, make_ci):
        a, b, c = make_ci(), make_ci(), make_ci()
        self._edge(db_session, a, b)
        self._edge(db_session, b, c)

        assert would_conflict(db_session, c.id, a.id, "depends_on") is False
