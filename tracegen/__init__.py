"""
tracegen: concurrent stress-trace generator for an ordered integer set.

Running a workload::

    import sys
    from tracegen.common import Config
    from tracegen.driver import run

    result = run(Config(num_threads=4, operations=1000), sys.stderr)

The pieces it is built from::

    from tracegen.intset import OrderedSet
    from tracegen.barrier import Barrier
    from tracegen.rand import RandomStream, SeedSource
    from tracegen.trace import TraceWriter

Command line::

    tracegen -n 4 -o 1000 -u 50 2> trace.txt
"""

__version__ = "0.1.0"
