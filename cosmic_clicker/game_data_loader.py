"""Game data loader for loading JSON configuration files."""
import copy
import json
from pathlib import Path

MODULE_KINDS = (
    'laser',
    'bot_bay',
    'converter',
    'cargo_hold',
    'engine',
    'jump_drive',
    'scanner',
)

class GameDataLoader:
    """Loads and caches game data from JSON files."""

    def __init__(self, data_dir=None):
        """Initialize the data loader."""
        if data_dir is None:
            # Catalog ships inside the package
            self.data_dir = Path(__file__).parent / 'game_data'
        else:
            self.data_dir = Path(data_dir)

        self._zones = None
        self._spawn_tables = None
        self._object_templates = None
        self._resources = None
        self._modules = None
        self._achievements = None

    def _read_json(self, filename):
        """Read a JSON file from the data directory."""
        file_path = self.data_dir / filename
        with open(file_path, 'r') as f:
            return json.load(f)

    def load_zones(self):
        """Load zone progression data."""
        if self._zones is None:
            data = self._read_json('zones.json')
            self._zones = list(data['zones'])
        return self._zones

    def get_zone(self, zone_number):
        """Get zone data by number."""
        for zone in self.load_zones():
            if zone['number'] == zone_number:
                return zone
        return None

    def get_fuel_required(self, zone_number):
        """Get fuel needed to complete a zone (inf for the last, open-ended zone)."""
        zone = self.get_zone(zone_number)
        if zone is None or zone.get('fuel_required') is None:
            return float('inf')
        return zone['fuel_required']

    def load_spawn_tables(self):
        """Load per-zone spawn tables, keyed by zone number."""
        if self._spawn_tables is None:
            file_path = self.data_dir / 'spawn_tables.json'
            if file_path.exists():
                data = self._read_json('spawn_tables.json')
                self._spawn_tables = {table['zone']: table for table in data.get('spawn_tables', [])}
            else:
                # Missing tables are handled per-tick as a configuration warning
                self._spawn_tables = {}
        return self._spawn_tables

    def get_spawn_table(self, zone_number):
        """Get the spawn table for a zone, or None."""
        return self.load_spawn_tables().get(zone_number)

    def load_object_templates(self):
        """Load object templates, keyed by template ID."""
        if self._object_templates is None:
            data = self._read_json('object_templates.json')
            self._object_templates = {t['id']: t for t in data['object_templates']}
        return self._object_templates

    def get_object_template(self, template_id):
        """Get object template by ID."""
        return self.load_object_templates().get(template_id)

    def load_resources(self):
        """Load resource definitions, keyed by resource ID."""
        if self._resources is None:
            data = self._read_json('resources.json')
            self._resources = {r['id']: r for r in data['resources']}
        return self._resources

    def get_resource(self, resource_id):
        """Get resource definition by ID."""
        return self.load_resources().get(resource_id)

    def load_modules(self):
        """Load module base stats and the upgrade catalog."""
        if self._modules is None:
            self._modules = self._read_json('modules.json')
        return self._modules

    def get_initial_modules(self):
        """Get a fresh copy of the starting module records."""
        modules = {}
        for kind, definition in self.load_modules()['initial_modules'].items():
            record = copy.deepcopy(definition.get('stats', {}))
            record['tier'] = definition.get('tier', 0)
            record['unlocked'] = definition.get('unlocked', False)
            record['purchased_upgrades'] = []
            modules[kind] = record
        return modules

    def get_upgrades(self):
        """Get every module upgrade."""
        return self.load_modules().get('upgrades', [])

    def get_upgrade_by_id(self, upgrade_id):
        """Get module upgrade by ID."""
        for upgrade in self.get_upgrades():
            if upgrade['id'] == upgrade_id:
                return upgrade
        return None

    def get_upgrades_for_module(self, module_kind):
        """Get upgrades that target a module, cheapest first."""
        upgrades = [u for u in self.get_upgrades() if u['module'] == module_kind]
        return sorted(upgrades, key=lambda u: u['cost'])

    def get_lower_is_better_stats(self):
        """Get stats where a smaller value is an improvement."""
        return set(self.load_modules().get('lower_is_better', []))

    def load_achievements(self):
        """Load the achievement catalog."""
        if self._achievements is None:
            data = self._read_json('achievements.json')
            self._achievements = data.get('achievements', [])
        return self._achievements

    def get_achievement_by_id(self, achievement_id):
        """Get achievement by ID."""
        for achievement in self.load_achievements():
            if achievement['id'] == achievement_id:
                return achievement
        return None

    def validate_data(self):
        """Validate loaded data structure."""
        from cosmic_clicker.achievements import ACHIEVEMENT_CONDITIONS
        from cosmic_clicker.upgrades import check_catalog_consistency

        errors = []

        # Validate zones
        zones = self.load_zones()
        if not zones:
            errors.append("No zones loaded")

        zone_numbers = [z['number'] for z in zones]
        if len(zone_numbers) != len(set(zone_numbers)):
            errors.append("Duplicate zone numbers found")

        # Validate spawn tables
        templates = self.load_object_templates()
        resources = self.load_resources()
        spawn_tables = self.load_spawn_tables()
        for zone_number in zone_numbers:
            if zone_number not in spawn_tables:
                errors.append(f"No spawn table for zone {zone_number}")
        for zone_number, table in spawn_tables.items():
            for entry in table.get('entries', []):
                if entry['template_id'] not in templates:
                    errors.append(f"Zone {zone_number} spawns unknown template {entry['template_id']}")
                if entry.get('weight', 0) < 0:
                    errors.append(f"Zone {zone_number} has negative weight for {entry['template_id']}")

        # Validate loot tables
        for template_id, template in templates.items():
            if template.get('mining_yield', 1.0) <= 0:
                errors.append(f"Template {template_id} has non-positive mining_yield")
            for loot in template.get('loot_table', []):
                if loot['resource'] not in resources:
                    errors.append(f"Template {template_id} drops unknown resource {loot['resource']}")

        # Validate modules and upgrade catalog
        initial_modules = self.get_initial_modules()
        missing = [kind for kind in MODULE_KINDS if kind not in initial_modules]
        if missing:
            errors.append(f"Missing module definitions: {missing}")
        errors.extend(check_catalog_consistency(
            self.get_upgrades(), initial_modules, self.get_lower_is_better_stats()
        ))

        # Validate achievements
        achievement_ids = set()
        for achievement in self.load_achievements():
            if achievement['id'] in achievement_ids:
                errors.append(f"Duplicate achievement id {achievement['id']}")
            achievement_ids.add(achievement['id'])
            if achievement['condition'] not in ACHIEVEMENT_CONDITIONS:
                errors.append(f"Achievement {achievement['id']} has unknown condition {achievement['condition']}")
            if achievement.get('threshold', 0) <= 0:
                errors.append(f"Achievement {achievement['id']} needs a positive threshold")

        return errors

# Global instance
_game_data_loader = None

def get_game_data_loader(data_dir=None):
    """Get or create the global game data loader instance."""
    global _game_data_loader
    if _game_data_loader is None:
        _game_data_loader = GameDataLoader(data_dir)
    return _game_data_loader
