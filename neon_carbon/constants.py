"""
Constants used across the neon-carbon codebase.
"""

# NEON data product identifiers
VST_DPID = 'DP1.10098.001'    # Vegetation structure
CDW_DPID = 'DP1.10014.001'    # Coarse downed wood bulk density
BBC_DPID = 'DP1.10067.001'    # Root biomass and chemistry, periodic
MGP_DPID = 'DP1.00096.001'    # Soil physical and chemical properties, megapit
SAAT_DPID = 'DP1.00002.001'   # Single aspirated air temperature

# Plant status values that indicate a living stem
LIVE_STATUSES = {
    'Live',
    'Live,  other damage',
    'Live, broken bole',
    'Live, disease damaged',
    'Live, insect damaged',
    'Live, physically damaged',
}

# Plant status values that indicate a dead stem still standing
STANDING_DEAD_STATUSES = {
    'Standing dead',
}

# Tree status classes
STATUS_ALIVE = 'alive'
STATUS_STANDING_DEAD = 'standing_dead'
STATUS_OTHER = 'other'

# Root status classes
ROOT_LIVE = 'live'
ROOT_DEAD = 'dead'
ROOT_UNKNOWN = 'unknown'
ROOT_STATUS_CLASSES = [ROOT_LIVE, ROOT_DEAD, ROOT_UNKNOWN]

# Budget vector labels, in order
BUDGET_LABELS = ['live_trees', 'standing_dead', 'downed_coarse_wood', 'soil', 'total']

# Unit conversion: grams to kilograms
G_TO_KG = 1 / 1000.0

# Unit conversion: square centimetres per square metre
CM2_PER_M2 = 10000.0
