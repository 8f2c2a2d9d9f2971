"""
Status Message

Plain-text summary of a restart outcome, shown once to the user.
Output lines are returned raw; escaping belongs to whoever renders them.
"""

from .restart_runner import RestartResult

NO_OUTPUT_TEXT = "No output returned"


def format_status_message(result: RestartResult, service_name: str = "PulseMesh") -> str:
    """
    Build the transient status text for a restart result.

    Example:
        Error restarting PulseMesh. Please check permissions and script path.
        Output:
        sudo: a password is required
    """
    if result.succeeded:
        return f"{service_name} restart initiated successfully."

    output_text = "\n".join(result.output_lines) if result.output_lines else NO_OUTPUT_TEXT
    return (
        f"Error restarting {service_name}. Please check permissions and script path.\n"
        f"Output:\n{output_text}"
    )
