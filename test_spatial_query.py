import unittest
from solarsystem import Body, Ore, Station, FeatureKind
from ships import Ship, Miner, Trader, Pirate, Visit, Wander
from spatial_query import filter_bodies, nearest_bodies, nearest_body, ships_in_range

def build_bodies():
    return [
        Body(radius=0.1),
        Body(radius=0.01, position=[1.0, 0.0], feature=Station(stock=5)),
        Body(radius=0.01, position=[0.0, 2.0], feature=Ore()),
        Body(radius=0.01, position=[-0.5, 0.0], feature=Station(stock=0)),
        Body(radius=0.01, position=[3.0, 3.0]),
        Body(radius=0.01, position=[-1.0, 0.0], feature=Station(stock=9)),
    ]

class TestBodyQueries(unittest.TestCase):

    def test_filter_ignores_stock(self):
        self.assertEqual(filter_bodies(build_bodies(), FeatureKind.STATION), [1, 3, 5])
        self.assertEqual(filter_bodies(build_bodies(), FeatureKind.ORE), [2])

    def test_nearest_bodies_sorted_by_distance(self):
        self.assertEqual(nearest_bodies(build_bodies(), FeatureKind.STATION, [-0.9, 0.0]), [5, 3, 1])

    def test_ties_keep_index_order(self):
        bodies = build_bodies()
        # Stations 1 and 5 are both at distance 1 from the origin
        bodies[3].position[:] = [0.0, 5.0]
        self.assertEqual(nearest_bodies(bodies, FeatureKind.STATION, [0.0, 0.0]), [1, 5, 3])

    def test_nearest_body(self):
        self.assertEqual(nearest_body(build_bodies(), FeatureKind.STATION, [0.9, 0.1]), 1)
        self.assertEqual(nearest_body(build_bodies(), FeatureKind.ORE, [0.9, 0.1]), 2)

    def test_no_match_is_empty(self):
        bodies = [Body(radius=0.1), Body(radius=0.01, feature=Station())]
        self.assertEqual(nearest_bodies(bodies, FeatureKind.ORE, [0.0, 0.0]), [])
        self.assertIsNone(nearest_body(bodies, FeatureKind.ORE, [0.0, 0.0]))

class TestShipsInRange(unittest.TestCase):

    def setUp(self):
        self.ships = [
            Ship(position=[0.0, 0.0], initial_speed=0.01, job=Miner(), goal=Visit(target=1)),
            Ship(position=[0.3, 0.0], initial_speed=0.01, job=Trader(carrying_cargo=True), goal=Visit(target=1)),
            Ship(position=[0.0, 0.5], initial_speed=0.01, job=Trader(carrying_cargo=True), goal=Visit(target=1)),
            Ship(position=[0.2, 0.0], initial_speed=0.01, job=Trader(carrying_cargo=False), goal=Visit(target=1)),
            Ship(position=[0.0, 0.0], initial_speed=0.01, job=Pirate(), goal=Wander()),
        ]

    def test_range_is_inclusive(self):
        self.assertEqual(ships_in_range(self.ships, [0.0, 0.0], 0.5), [0, 1, 2, 3, 4])
        self.assertEqual(ships_in_range(self.ships, [0.0, 0.0], 0.25), [0, 3, 4])

    def test_predicate_filters(self):
        carrying = ships_in_range(self.ships, [0.0, 0.0], 0.5, predicate=lambda ship: ship.carrying_cargo)
        self.assertEqual(carrying, [1, 2])

    def test_empty_registry(self):
        self.assertEqual(ships_in_range([], [0.0, 0.0], 1.0), [])

if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
