"""State/store layer.

Repositories own one collection each; :class:`fleetfines.state.store.FleetStore`
wires them to a single storage backend.
"""
