# ============================================================================
# SCRIPTS
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Scripts - Command line entry points
# ============================================================================
