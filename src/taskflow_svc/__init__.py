"""
TaskFlow Service - Work Request Tracking

A request lifecycle and governance service providing:
- Role-based (Administrator / Agent) field-level permissions
- A status state machine for request resolution
- Automatic overdue tracking and priority escalation
- An append-only audit trail of comments
"""

__version__ = "0.1.0"
