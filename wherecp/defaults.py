"""Default values and constants."""

# IPv4 address space
ADDRESS_BITS = 32
ADDRESS_MAX = 0xFFFFFFFF

# Port space
PORT_MIN = 0
PORT_MAX = 65535

# Query selector aliases -> canonical side
SELECTOR_ALIASES = {
    "src": "source",
    "source": "source",
    "dst": "destination",
    "destination": "destination",
    "svc": "service",
    "service": "service",
    "any": "any",
}

# Name of the transient group used by the "any" selector
ANY_GROUP_NAME = "any"

# Names given to objects built from query literals
QUERY_OBJECT_NAMES = {
    "host": "filter host",
    "network": "filter network",
    "range": "filter range",
    "port": "filter port",
    "port_range": "filter port range",
}

# Rule action flag to display name
ACTION_NAMES = {
    True: "allow",
    False: "deny",
}

# Policy file action names to flag
POLICY_ACTIONS = {
    "allow": True,
    "accept": True,
    "permit": True,
    "deny": False,
    "drop": False,
    "reject": False,
}
