from enum import Enum


class DuplexMode(Enum):
    TDD = "TDD"
    FDD = "FDD"


class Backend(Enum):
    SYNTHETIC = "synthetic"
    FLOWMON = "flowmon"
    NS3 = "ns3"
    ANALYTIC = "analytic"
