"""WellWatch services.

- risk_engine: fall, frailty and mental-health risk scoring
- alert_service: risk notifications published to Kinesis
- All services hash user identifiers with hash_pii() before logging
"""
