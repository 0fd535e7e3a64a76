"""Internal constants shared across the library."""

BASE_URL = "https://liquidlands-api.sirsean.workers.dev"
USER_AGENT = "landhunter/1.0"
APP_NAME = "land-hunter"
APP_VERSION = "10189a1a1"

#: Status message the API returns for a successful call.
SUCCESS_MESSAGE = "Success"

# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

LISTING_ENDPOINT = "/raw/land"
DETAIL_ENDPOINT = "/land/get"
FACTION_TILES_ENDPOINT = "/faction/{address}/tiles"

# ------------------------------------------------------------------
# Reward defaults
# ------------------------------------------------------------------

DEFAULT_DECAY_CAP_DAYS = 2.0
DEFAULT_EXCHANGE_RATE = 3.7
DEFAULT_MIN_REWARD = 0.05

# Factions allied with the operator; their lands are never raid targets.
DEFAULT_FRIENDLY_FACTION_IDS: frozenset[int] = frozenset(
    {
        199,  # Homie G
        249,  # Wandernauts
        266,  # Cryptorunners
        240,  # Bored Ape Pixel Club
        243,  # Bored 2 Death Club
        253,  # Battle Bunnies
        239,  # TrapMonkie
        349,  # Northern Guilds
    }
)

# ------------------------------------------------------------------
# View defaults
# ------------------------------------------------------------------

DEFAULT_MAX_DEFENSE = 10.0
DEFAULT_DISPLAY_LIMIT = 100
