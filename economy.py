# economy.py
import logging
from typing import List

from solarsystem import Body, FeatureKind
from ships import Ship, Trader, Visit
from spatial_query import filter_bodies


def spawn_traders(bodies: List[Body], ships: List[Ship], sim_config, rng) -> List[int]:
    """Launches a trader from every station whose stock exceeds `Economy.TRADER_COST`.

    The station pays the cost, and the new `Trader` (without cargo) starts at the
    station with `Visit` set to that same station, so it picks a destination on
    its first update.

    Returns:
        List[int]: Registry indices of the spawned traders.
    """
    cost = sim_config.Economy.TRADER_COST
    spawned = []
    for station_index in filter_bodies(bodies, FeatureKind.STATION):
        station = bodies[station_index]
        if station.stock > cost:
            station.add_stock(-cost)
            ships.append(Ship.with_random_speed(
                job=Trader(carrying_cargo=False),
                goal=Visit(target=station_index),
                position=station.position.copy(),
                sim_config=sim_config,
                rng=rng,
            ))
            spawned.append(len(ships) - 1)
            logging.debug(f"Station {station_index} launched trader {len(ships) - 1}; stock now {station.stock}.")
    return spawned


def calculate_total_economy_units(bodies: List[Body], ships: List[Ship]) -> int:
    """Stock held by all stations plus one unit per cargo-carrying trader.

    Without raids the total only changes through mining deliveries (+1 each)
    and trader launches (-TRADER_COST each).
    """
    stock = sum(bodies[index].stock for index in filter_bodies(bodies, FeatureKind.STATION))
    in_flight = sum(1 for ship in ships if ship.carrying_cargo)
    return stock + in_flight
