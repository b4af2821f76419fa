from typing import Any, Dict, List, TypeAlias

FlowId: TypeAlias = int
ResultDocument: TypeAlias = Dict[str, Any]
StoreRecord: TypeAlias = Dict[str, Any]
SweepRow: TypeAlias = Dict[str, Any]
SweepRows: TypeAlias = List[SweepRow]
