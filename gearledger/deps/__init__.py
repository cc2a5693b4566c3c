# Marks `gearledger.deps` as a real package so `from gearledger.deps.auth import require_api_key` resolves.
