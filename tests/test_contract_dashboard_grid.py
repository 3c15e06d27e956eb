import unittest

from panelboard.components.dashboard.grid import (
    BREAKPOINT,
    apply_grid_layout,
    count_unplaced,
    create_dashboard_grid,
    position_to_layout_item,
)
from panelboard.layouts.grid import GridPlacementEngine
from panelboard.layouts.models import GridPosition, PanelData, Widget


def _engine_with(*placements, rows=8, cols=6):
    widgets = [
        Widget(id=widget_id, title=f"W{widget_id}", position=GridPosition.parse(area))
        for widget_id, area in placements
    ]
    engine = GridPlacementEngine(rows=rows, cols=cols)
    engine.load_snapshot({"main": PanelData(title="Main", widgets=widgets)})
    return engine


def _reported(engine, **changes):
    """Grid layouts as the browser would report them, with per-widget edits."""
    items = []
    for _, widget in engine.iter_widgets():
        if widget.position is None:
            continue
        item = position_to_layout_item(widget)
        item.update(changes.get(f"w{widget.id}", {}))
        items.append(item)
    return {BREAKPOINT: items}


class TestLayoutItems(unittest.TestCase):
    def test_positions_map_to_zero_based_items(self):
        widget = Widget(id=4, title="A", position=GridPosition.parse("3 / 2 / 5 / 5"))
        self.assertEqual(
            position_to_layout_item(widget, min_span=2),
            {"i": "widget-4", "x": 1, "y": 2, "w": 3, "h": 2, "minW": 2, "minH": 2},
        )

    def test_grid_never_compacts_or_pushes(self):
        engine = _engine_with((1, "1 / 1 / 3 / 3"), (2, "1 / 3 / 3 / 5"))
        grid = create_dashboard_grid(engine, customize=True).children[0]
        self.assertIsNone(grid.compactType)
        self.assertTrue(grid.preventCollision)
        self.assertTrue(grid.isDraggable)
        self.assertEqual(grid.cols, {BREAKPOINT: 6})
        self.assertEqual([item["i"] for item in grid.layouts[BREAKPOINT]], ["widget-1", "widget-2"])
        self.assertEqual([child.id for child in grid.children], ["widget-1", "widget-2"])

    def test_grid_is_locked_outside_customize_mode(self):
        grid = create_dashboard_grid(_engine_with((1, "1 / 1 / 3 / 3"))).children[0]
        self.assertFalse(grid.isDraggable)
        self.assertFalse(grid.isResizable)

    def test_unplaced_widgets_are_left_out(self):
        engine = _engine_with((1, "1 / 1 / 3 / 7"), rows=2, cols=6)
        engine.panels["main"].widgets.append(Widget(id=2, title="Extra"))
        grid = create_dashboard_grid(engine).children[0]
        self.assertEqual(len(grid.layouts[BREAKPOINT]), 1)
        self.assertEqual(count_unplaced(engine), 1)


class TestApplyGridLayout(unittest.TestCase):
    def setUp(self):
        self.engine = _engine_with((1, "1 / 1 / 3 / 3"), (2, "1 / 3 / 3 / 5"))

    def test_unchanged_layout_is_a_no_op(self):
        self.assertFalse(apply_grid_layout(self.engine, _reported(self.engine)))
        self.assertFalse(apply_grid_layout(self.engine, None))

    def test_drop_on_free_cells_moves_widget(self):
        self.assertTrue(apply_grid_layout(self.engine, _reported(self.engine, w1={"x": 0, "y": 4})))
        self.assertEqual(str(self.engine.get_widget(1).position), "5 / 1 / 7 / 3")

    def test_drop_on_another_widget_reverts(self):
        self.assertTrue(apply_grid_layout(self.engine, _reported(self.engine, w1={"x": 2, "y": 0})))
        self.assertEqual(str(self.engine.get_widget(1).position), "1 / 1 / 3 / 3")
        self.assertEqual(str(self.engine.get_widget(2).position), "1 / 3 / 3 / 5")

    def test_drop_past_the_edge_is_clamped(self):
        apply_grid_layout(self.engine, _reported(self.engine, w2={"x": 9, "y": 20}))
        self.assertEqual(str(self.engine.get_widget(2).position), "7 / 5 / 9 / 7")

    def test_width_change_resizes_east(self):
        apply_grid_layout(self.engine, _reported(self.engine, w1={"w": 1}))
        self.assertEqual(str(self.engine.get_widget(1).position), "1 / 1 / 3 / 2")

    def test_height_change_resizes_south(self):
        apply_grid_layout(self.engine, _reported(self.engine, w2={"h": 4}))
        self.assertEqual(str(self.engine.get_widget(2).position), "1 / 3 / 5 / 5")

    def test_resize_into_neighbor_is_rejected(self):
        apply_grid_layout(self.engine, _reported(self.engine, w1={"w": 3, "h": 3}))
        self.assertEqual(str(self.engine.get_widget(1).position), "1 / 1 / 3 / 3")

    def test_unknown_and_malformed_items_are_ignored(self):
        layouts = _reported(self.engine)
        layouts[BREAKPOINT].extend([
            {"i": "widget-99", "x": 0, "y": 5, "w": 1, "h": 1},
            {"i": "something-else", "x": 0, "y": 5, "w": 1, "h": 1},
            {"i": "widget-1", "x": "0", "y": 5, "w": 2, "h": 2},
        ])
        self.assertFalse(apply_grid_layout(self.engine, layouts))
        self.assertEqual(str(self.engine.get_widget(1).position), "1 / 1 / 3 / 3")

    def test_engine_has_no_interaction_left_over(self):
        apply_grid_layout(self.engine, _reported(self.engine, w1={"x": 0, "y": 4}, w2={"w": 1}))
        self.assertIsNone(self.engine.interaction)
        self.assertEqual(str(self.engine.get_widget(1).position), "5 / 1 / 7 / 3")
        self.assertEqual(str(self.engine.get_widget(2).position), "1 / 3 / 3 / 4")


if __name__ == "__main__":
    unittest.main(verbosity=2)
