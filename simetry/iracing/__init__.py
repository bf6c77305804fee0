"""iRacing telemetry: headers, variables, session info and recorded files."""

__all__ = ["disk_client", "flags", "header", "session_info", "sim_state", "var_data"]