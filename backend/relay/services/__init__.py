# Services package init
"""
Arduino Relay - Services Layer
===============================

What:  Everything that talks to the outside world on behalf of a route.

Service Inventory:
    - DataSink (abstract): append-only keyed store interface
    - FirebaseDataSink: Firebase Realtime Database implementation
    - UnavailableDataSink: always-failing stand-in when no sink is installed
    - WriteSucceeded / WriteFailed: explicit result of one append

Why services are separate from routes:
    Routes handle HTTP; the sink handles Firebase. Swapping the store or
    faking it in tests never touches the route code.
"""

from relay.services.data_sink import (
    DataSink,
    FirebaseDataSink,
    UnavailableDataSink,
    WriteFailed,
    WriteResult,
    WriteSucceeded,
)

__all__ = [
    "DataSink",
    "FirebaseDataSink",
    "UnavailableDataSink",
    "WriteFailed",
    "WriteResult",
    "WriteSucceeded",
]
