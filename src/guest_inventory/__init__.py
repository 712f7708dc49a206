"""
guest_inventory

This package turns an already collected host inventory into the canonical
shapes the inventory collector understands, fingerprints them, and reports
them with a checksum first protocol.

We keep modules small and well separated:
core contains the snapshot input model and errors
schema contains the two canonical wire shapes and their codec
normalizer maps a snapshot to each canonical shape
fingerprint computes content digests used for change detection
report contains the checksum and escalate state machine
attributes publishes snapshot fields to a metadata sink
snapshot contains snapshot providers
agent wires everything into a reporting cycle
"""
