"""Router state machine, topology and step driver."""
