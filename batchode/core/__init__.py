"""
batchode: Core Subpackage
-------------------------
Error taxonomy and logging, the central registry, shared protocols, the batch
integrator loop and configuration models.
"""
