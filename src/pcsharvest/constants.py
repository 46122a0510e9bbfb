import logging

PCS_MAIN = "https://www.procyclingstats.com"

LOG = logging.getLogger('pcsharvest')

# written into a field that could not be coerced, so the row survives
UNPARSEABLE = '<unparseable>'

# slug -> tier, anything missing is 'Other'
RACE_TIERS = {
    'tour-de-france': 'Grand Tour',
    'giro-d-italia': 'Grand Tour',
    'vuelta-a-espana': 'Grand Tour',
    'milano-sanremo': 'Monument',
    'ronde-van-vlaanderen': 'Monument',
    'paris-roubaix': 'Monument',
    'liege-bastogne-liege': 'Monument',
    'il-lombardia': 'Monument',
}
DEFAULT_TIER = 'Other'

# profile icon classes on result pages
PROFILE_DEFINITIONS = {
    'p1': 'flat',
    'p2': 'hills-flatf',
    'p3': 'hills-uphillf',
    'p4': 'mountains-flatf',
    'p5': 'mountains-uphillf',
}
