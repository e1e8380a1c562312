"""
Tests for the drag-to-select state machine.
"""

from photoshelf.editing import CropRegion, RegionSelection, SelectionState


class TestDrag:

    def test_drag_commits_last_candidate(self):
        selection = RegionSelection().start(10, 10).move(50, 5).end(50, 5)

        assert selection.state is SelectionState.IDLE
        assert selection.committed == CropRegion(10, 5, 40, 5)

    def test_start_records_anchor_with_empty_candidate(self):
        selection = RegionSelection().start(7, 3)

        assert selection.is_dragging
        assert selection.anchor == (7, 3)
        assert selection.candidate == CropRegion(7, 3, 0, 0)

    def test_moves_are_recomputed_from_anchor(self):
        selection = RegionSelection().start(20, 20)
        selection = selection.move(100, 100).move(10, 30)

        assert selection.candidate == CropRegion(10, 20, 10, 10)

    def test_end_without_position_uses_last_move(self):
        selection = RegionSelection().start(0, 0).move(8, 6).end()
        assert selection.committed == CropRegion(0, 0, 8, 6)

    def test_coordinates_snap_to_pixels(self):
        selection = RegionSelection().start(1.4, 1.6).move(5.6, 9.2)
        assert selection.candidate == CropRegion(1, 2, 5, 7)

    def test_restart_replaces_previous_drag(self):
        selection = RegionSelection().start(0, 0).move(5, 5).start(3, 3).move(4, 4)
        assert selection.candidate == CropRegion(3, 3, 1, 1)


class TestIdleEvents:

    def test_move_while_idle_is_ignored(self):
        selection = RegionSelection()
        assert selection.move(5, 5) == selection

    def test_end_while_idle_is_ignored(self):
        selection = RegionSelection().start(0, 0).move(4, 4).end()
        assert selection.end(9, 9) == selection

    def test_region_prefers_live_candidate(self):
        committed = RegionSelection().start(0, 0).move(4, 4).end()
        dragging = committed.start(1, 1).move(2, 3)

        assert committed.region == CropRegion(0, 0, 4, 4)
        assert dragging.region == CropRegion(1, 1, 1, 2)
        # The previous commit survives until the new drag ends
        assert dragging.committed == CropRegion(0, 0, 4, 4)

    def test_reset_clears_everything(self):
        selection = RegionSelection().start(0, 0).move(4, 4).end().reset()
        assert selection == RegionSelection()
        assert selection.region is None


class TestSerialization:

    def test_dragging_state_survives_dict_round_trip(self):
        selection = RegionSelection().start(10, 10).move(50, 5)
        restored = RegionSelection.from_dict(selection.to_dict())

        assert restored == selection
        assert restored.end().committed == CropRegion(10, 5, 40, 5)

    def test_to_dict_shape(self):
        data = RegionSelection().start(2, 3).to_dict()
        assert data == {
            "state": "dragging",
            "anchor": [2, 3],
            "candidate": {"x": 2, "y": 3, "width": 0, "height": 0},
            "committed": None,
        }

    def test_from_empty_dict_is_idle(self):
        assert RegionSelection.from_dict({}) == RegionSelection()
