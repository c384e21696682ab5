"""Module upgrade purchases against the prerequisite graph."""
import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

NOT_FOUND = 'not_found'
ALREADY_OWNED = 'already_owned'
PREREQUISITES_UNMET = 'prerequisites_unmet'
INSUFFICIENT_CREDITS = 'insufficient_credits'

PurchaseResult = namedtuple('PurchaseResult', ['success', 'upgrade_id', 'reason'])

def is_upgrade_purchased(upgrade_id, module):
    """Check if a module already owns an upgrade."""
    return upgrade_id in module.get('purchased_upgrades', [])

def has_prerequisites(upgrade, module):
    """Check that every prerequisite of an upgrade is owned by the module."""
    return all(is_upgrade_purchased(prereq, module) for prereq in upgrade.get('prerequisites', []))

def can_purchase(upgrade, module, credits):
    """Check if an upgrade can be bought right now."""
    if is_upgrade_purchased(upgrade['id'], module):
        return False
    if credits < upgrade['cost']:
        return False
    return has_prerequisites(upgrade, module)

def get_rejection_reason(upgrade, module, credits):
    """Why can_purchase() said no, or None if it would say yes."""
    if is_upgrade_purchased(upgrade['id'], module):
        return ALREADY_OWNED
    if not has_prerequisites(upgrade, module):
        return PREREQUISITES_UNMET
    if credits < upgrade['cost']:
        return INSUFFICIENT_CREDITS
    return None

def get_upgrade_status(upgrade, module, credits):
    """Derived display flags for one upgrade."""
    is_purchased = is_upgrade_purchased(upgrade['id'], module)
    is_affordable = credits >= upgrade['cost']
    is_locked = not has_prerequisites(upgrade, module)
    return {
        'is_purchased': is_purchased,
        'is_affordable': is_affordable,
        'is_locked': is_locked,
        'can_purchase': not is_purchased and is_affordable and not is_locked,
    }

def apply_purchase(state, upgrade):
    """Apply an upgrade to the game state.

    Callers must have checked can_purchase(); nothing is re-validated here.
    """
    module = state['modules'][upgrade['module']]

    state['credits'] -= upgrade['cost']
    if upgrade['id'] not in module['purchased_upgrades']:
        module['purchased_upgrades'].append(upgrade['id'])

    # Stat changes replace the current value
    for stat, value in upgrade.get('stat_changes', {}).items():
        module[stat] = list(value) if isinstance(value, list) else value

    module['tier'] = max(module.get('tier', 0), upgrade.get('tier', 0))
    module['unlocked'] = True

    statistics = state.get('statistics')
    if statistics is not None:
        statistics['upgrades_purchased'] = statistics.get('upgrades_purchased', 0) + 1

def purchase(state, upgrade_id, catalog):
    """Try to buy an upgrade.

    catalog is anything with get_upgrade_by_id() (normally the game data
    loader). Returns a PurchaseResult; a rejected purchase leaves the state
    untouched.
    """
    upgrade = catalog.get_upgrade_by_id(upgrade_id)
    if upgrade is None or upgrade['module'] not in state['modules']:
        return PurchaseResult(False, upgrade_id, NOT_FOUND)

    module = state['modules'][upgrade['module']]
    if not can_purchase(upgrade, module, state['credits']):
        return PurchaseResult(False, upgrade_id, get_rejection_reason(upgrade, module, state['credits']))

    apply_purchase(state, upgrade)
    logger.info(f"Purchased upgrade {upgrade_id} for {upgrade['cost']} credits")
    return PurchaseResult(True, upgrade_id, None)

def _is_improvement(stat, old, new, lower_is_better):
    """True if new is at least as good as old for this stat."""
    if isinstance(old, bool) or isinstance(new, bool):
        return not (old is True and new is False)
    if isinstance(old, list) and isinstance(new, list):
        return set(old).issubset(new)
    if isinstance(old, (int, float)) and isinstance(new, (int, float)):
        if stat in lower_is_better:
            return new <= old
        return new >= old
    return True

def _find_cycles(upgrades_by_id):
    """Upgrade IDs that sit on a prerequisite cycle."""
    visiting = set()
    done = set()
    on_cycle = set()

    def visit(upgrade_id, path):
        if upgrade_id in done or upgrade_id not in upgrades_by_id:
            return
        if upgrade_id in visiting:
            on_cycle.update(path[path.index(upgrade_id):])
            return
        visiting.add(upgrade_id)
        path.append(upgrade_id)
        for prereq in upgrades_by_id[upgrade_id].get('prerequisites', []):
            visit(prereq, path)
        path.pop()
        visiting.discard(upgrade_id)
        done.add(upgrade_id)

    for upgrade_id in upgrades_by_id:
        visit(upgrade_id, [])
    return on_cycle

def check_catalog_consistency(upgrades, initial_modules, lower_is_better=()):
    """Check the upgrade catalog against the module definitions.

    Returns a list of error strings (empty when consistent). Every upgrade
    must target a known module and stat, name known same-module
    prerequisites, sit on no cycle, and never make a stat worse than its
    prerequisites or the module's starting value.
    """
    errors = []
    lower_is_better = set(lower_is_better)
    upgrades_by_id = {}

    for upgrade in upgrades:
        if upgrade['id'] in upgrades_by_id:
            errors.append(f"Duplicate upgrade id {upgrade['id']}")
        upgrades_by_id[upgrade['id']] = upgrade

    for upgrade in upgrades:
        upgrade_id = upgrade['id']
        module = initial_modules.get(upgrade['module'])
        if module is None:
            errors.append(f"Upgrade {upgrade_id} targets unknown module {upgrade['module']}")
            continue

        if upgrade.get('cost', 0) < 0:
            errors.append(f"Upgrade {upgrade_id} has negative cost")

        for stat, value in upgrade.get('stat_changes', {}).items():
            if stat not in module:
                errors.append(f"Upgrade {upgrade_id} changes unknown stat {upgrade['module']}.{stat}")
            elif not _is_improvement(stat, module[stat], value, lower_is_better):
                errors.append(f"Upgrade {upgrade_id} makes {stat} worse than the starting value")

        for prereq_id in upgrade.get('prerequisites', []):
            prereq = upgrades_by_id.get(prereq_id)
            if prereq is None:
                errors.append(f"Upgrade {upgrade_id} requires unknown upgrade {prereq_id}")
                continue
            if prereq['module'] != upgrade['module']:
                errors.append(f"Upgrade {upgrade_id} requires {prereq_id} from another module")
                continue
            for stat, value in upgrade.get('stat_changes', {}).items():
                if stat not in prereq.get('stat_changes', {}):
                    continue
                if not _is_improvement(stat, prereq['stat_changes'][stat], value, lower_is_better):
                    errors.append(f"Upgrade {upgrade_id} makes {stat} worse than its prerequisite {prereq_id}")

    for upgrade_id in sorted(_find_cycles(upgrades_by_id)):
        errors.append(f"Upgrade {upgrade_id} is part of a prerequisite cycle")

    return errors
