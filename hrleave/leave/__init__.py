"""Leave module — calendar primitives, sandwich deduction engine, service and API."""
