"""
ISS LOC Sync Package

Republishes the live position of the International Space Station as a DNS
LOC record through the Cloudflare DNS API.

Modules:
    position_source: ISS position from the telemetry API or a propagated TLE
    tle_propagation: SGP4 propagation and TEME to geodetic conversion
    loc_encoder: Decimal degrees to LOC record fields
    dns_repository: Cloudflare LOC record lookup, create and update
    orchestrator: One fetch-encode-upsert run
    scheduler: Fixed-interval trigger

References:
    Davis, C., Vixie, P., Goodwin, T., & Dickinson, I. (1996).
    A Means for Expressing Location Information in the Domain Name System.
    RFC 1876.
"""

__version__ = "1.0.0"
