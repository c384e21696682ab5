"""Resource conversion, selling and cargo-space helpers.

Resource data comes from the catalog (GameDataLoader.load_resources()), a
dict of resource ID -> {tier, fuel_conversion_rate, credit_value, ...}.
"""
import math

def get_conversion_rate(resource_type, catalog):
    """Fuel produced per unit of a resource."""
    resource = catalog.get(resource_type)
    return resource['fuel_conversion_rate'] if resource else 1

def get_resource_tier(resource_type, catalog):
    resource = catalog.get(resource_type)
    return resource['tier'] if resource else 1

def get_resource_credit_value(resource_type, catalog):
    """Credits earned per unit sold."""
    resource = catalog.get(resource_type)
    return resource['credit_value'] if resource else 1

def convert_resource_to_fuel(resource_type, amount, catalog, efficiency=1.0):
    """Fuel produced by converting amount units at the given efficiency."""
    return amount * get_conversion_rate(resource_type, catalog) * efficiency

def calculate_resource_value(resource_type, amount, catalog, market_multiplier=1.0):
    """Credits earned by selling amount units (whole credits only)."""
    return math.floor(amount * get_resource_credit_value(resource_type, catalog) * market_multiplier)

def is_resource_tier_unlocked(resource_type, unlocked_tiers, catalog):
    return get_resource_tier(resource_type, catalog) in unlocked_tiers

def calculate_total_cargo(resources):
    """Total units held across every resource type."""
    return sum(resources.values())

def count_used_slots(resources):
    """Number of distinct resource types currently held."""
    return sum(1 for amount in resources.values() if amount > 0)

def calculate_max_cargo_addition(resources, resource_type, amount, cargo_hold):
    """How many of amount units fit into the hold.

    A resource type not already held needs a free slot; the total is bounded
    by cargo_capacity.
    """
    if amount <= 0:
        return 0

    if resources.get(resource_type, 0) <= 0 and count_used_slots(resources) >= cargo_hold['cargo_slots']:
        return 0

    available_space = cargo_hold['cargo_capacity'] - calculate_total_cargo(resources)
    return min(amount, max(0, available_space))

def calculate_conversion_amount(conversion_speed, delta_time, carried_progress=0.0):
    """Whole units the converter may process this tick.

    Returns (units, remaining_progress); the fractional part carries over
    to the next tick.
    """
    budget = carried_progress + conversion_speed * delta_time
    units = math.floor(budget)
    return units, budget - units

def calculate_convertible_amount(stock, auto_convert_percent):
    """Units of a stock the converter may take (auto-convert share)."""
    return math.floor(stock * auto_convert_percent / 100)
