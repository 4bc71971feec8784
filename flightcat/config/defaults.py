"""Default airport set: the major Austrian aerodromes with METAR/TAF service."""

from flightcat.config.schema import AirportConfig

DEFAULT_AIRPORTS: list[AirportConfig] = [
    AirportConfig(icao="LOWW", name="Wien-Schwechat", major=True),
    AirportConfig(icao="LOWS", name="Salzburg", major=True),
    AirportConfig(icao="LOWG", name="Graz", major=True),
    AirportConfig(icao="LOWI", name="Innsbruck", major=True),
    AirportConfig(icao="LOWK", name="Klagenfurt", major=True),
    AirportConfig(icao="LOWL", name="Linz", major=True),
]
