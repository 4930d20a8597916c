# tests/conftest.py
import pytest

from gclog.models import GCFlags, PauseEvent


JDK_BANNER = (
    "OpenJDK 64-Bit Server VM (25.332-b09) for linux-amd64 JRE (1.8.0_332-b09), built on "
    'Apr 20 2022 08:18:57 by "openjdk" with gcc 4.4.7 20120313 (Red Hat 4.4.7-23)'
)
MEMORY_LINE = "Memory: 4k page, physical 128000000k(127996468k free), swap 0k(0k free)"
G1_FLAGS_LINE = (
    "CommandLine flags: -XX:+DisableExplicitGC -XX:ErrorFile=/opt/app/data/hs_err_pid%p.log "
    "-XX:G1HeapRegionSize=33554432 -XX:GCLogFileSize=4096000 -XX:+HeapDumpOnOutOfMemoryError "
    "-XX:HeapDumpPath=/opt/app/data/ -XX:InitialHeapSize=2048000000 "
    "-XX:InitiatingHeapOccupancyPercent=25 -XX:MaxDirectMemorySize=120259084288 "
    "-XX:MaxGCPauseMillis=500 -XX:MaxHeapSize=17179869184 -XX:NumberOfGCLogFiles=5 "
    "-XX:+PrintClassHistogramAfterFullGC -XX:+PrintClassHistogramBeforeFullGC -XX:+PrintGC "
    "-XX:+PrintGCDateStamps -XX:+PrintGCDetails -XX:+PrintGCTimeStamps "
    "-XX:+UseCompressedClassPointers -XX:+UseCompressedOops -XX:+UseG1GC -XX:+UseGCLogFileRotation"
)
HUMONGOUS_PAUSE_LINE = (
    "2021-02-22T01:01:02.120+0000: 22000.498: [GC pause (G1 Humongous Allocation) (young) "
    "(initial-mark), 0.0911111 secs]"
)


@pytest.fixture
def humongous_pause_line():
    return HUMONGOUS_PAUSE_LINE


@pytest.fixture
def g1_flags_line():
    return G1_FLAGS_LINE


@pytest.fixture
def full_gc_record():
    """Full GC with a before-histogram, duration on the line closing the record."""
    return """2022-01-02T11:11:01.111+0000: 234567.120: [Full GC (Allocation Failure) 2022-01-02T11:11:01.111+0000: 234567.120: [Class Histogram (before full gc):
num     #instances         #bytes  class name
----------------------------------------------
    1:       9013468      888888888  org.apache.arrow.memory.ArrowBuf
    2:       4547890      523123575  io.netty.buffer.PooledUnsafeDirectByteBuf
    3:         53333      444444444  [I
    6:        964740      186324576  [J
    8:       4312460      147067264  [Ljava.lang.Object;
   16:        431460       91111101  [C
   20:        431460       91111101  [B
10821:             1             16  sun.util.resources.LocaleData$LocaleDataResourceBundleControl
Total      99999999     8643256886
, 1.1111111 secs]
    4185M->1198M(5336M), 4.3449655 secs]"""


@pytest.fixture
def full_gc_with_references_log():
    """Full GC whose duration follows reference processing, then an after-histogram."""
    return f"""{JDK_BANNER}
{MEMORY_LINE}
{G1_FLAGS_LINE}
{HUMONGOUS_PAUSE_LINE}
2022-08-24T01:54:38.603+0000: 190268.356: [Full GC (Allocation Failure) 2022-08-24T01:54:38.603+0000: 190268.356: [Class Histogram (before full gc):
num     #instances         #bytes  class name
----------------------------------------------
    1:        954593     4097572584  [B
    2:        135687      723913256  [I
    3:       1676254      265188008  [J
    4:       2769733      177262912  org.apache.arrow.memory.ArrowBuf
    7:       2080367       99729672  [Ljava.lang.Object;
Total      34967203     6624451024
, 0.9324195 secs]
2022-08-24T01:54:40.318+0000: 190270.071: [SoftReference, 24521 refs, 0.0035689 secs]2022-08-24T01:54:40.322+0000: 190270.074: [WeakReference, 24515 refs, 0.0017063 secs]2022-08-24T01:54:40.323+0000: 190270.076: [FinalReference, 1360 refs, 0.0003365 secs]2022-08-24T01:54:40.324+0000: 190270.076: [PhantomReference, 0 refs, 12778 refs, 0.0004892 secs]2022-08-24T01:54:40.324+0000: 190270.077: [JNI Weak Reference, 0.0000910 secs] 16364M->4966M(16384M), 3.6564555 secs]
    [Eden: 0.0B(800.0M)->0.0B(8064.0M) Survivors: 0.0B->0.0B Heap: 16364.4M(16384.0M)->4966.6M(16384.0M)], [Metaspace: 168826K->155496K(1314816K)]
    2022-08-24T01:54:42.260+0000: 190272.012: [Class Histogram (after full gc):
    num     #instances         #bytes  class name
    ----------------------------------------------
    1:        891298     4042599072  [B
    2:        909679      182473568  [J
    5:       1131756       71520808  [Ljava.lang.Object;
    Total      21384721     5207859016
    , 0.4783018 secs]
    [Times: user=4.76 sys=0.97, real=4.14 secs]
"""


@pytest.fixture
def g1_ergonomics_record():
    return """2022-07-22T18:41:06.240+0000: 54055.679: [GC pause (G1 Evacuation Pause) (young) 54055.679: [G1Ergonomics (CSet Construction) start choosing CSet, _pending_cards: 3785, predicted base time: 8.89 ms, remaining time: 491.11 ms, target pause time: 500.00 ms]
54055.679: [G1Ergonomics (CSet Construction) add young regions to CSet, eden: 62 regions, survivors: 0 regions, predicted young region time: 298.30 ms]
54055.679: [G1Ergonomics (CSet Construction) finish choosing CSet, eden: 62 regions, survivors: 0 regions, old: 0 regions, predicted pause time: 307.19 ms, target pause time: 500.00 ms]
2022-07-22T18:41:06.509+0000: 54055.947: [SoftReference, 0 refs, 0.0000831 secs]2022-07-22T18:41:06.509+0000: 54055.947: [WeakReference, 343 refs, 0.0000987 secs]2022-07-22T18:41:06.509+0000: 54055.947: [FinalReference, 3 refs, 0.0000209 secs]2022-07-22T18:41:06.509+0000: 54055.947: [PhantomReference, 5 refs, 2 refs, 0.0000114 secs]2022-07-22T18:41:06.509+0000: 54055.947: [JNI Weak Reference, 0.0000921 secs] 54055.952: [G1Ergonomics (Heap Sizing) attempt heap expansion, reason: recent GC overhead higher than threshold after GC, recent GC overhead: 44.66 %, threshold: 10.00 %, uncommitted: 5301600256 bytes, calculated expansion amount: 1060320051 bytes (20.00 %)]
54055.952: [G1Ergonomics (Heap Sizing) expand the heap, requested expansion amount: 1060320051 bytes, attempted expansion amount: 1073741824 bytes]
54055.954: [G1Ergonomics (Concurrent Cycles) request concurrent cycle initiation, reason: occupancy higher than threshold, occupancy: 4664066048 bytes, allocation request: 0 bytes, threshold: 3238002675 bytes (25.00 %), source: end of GC]
, 0.2753957 secs]"""


@pytest.fixture
def g1_ergonomics_log(g1_ergonomics_record):
    return f"""2022-07-22 18:41:06 GC log file created /opt/app/data/gc.log.4
{JDK_BANNER}
Memory: 4k page, physical 122412460k(86529060k free), swap 0k(0k free)
CommandLine flags: -XX:CICompilerCount=4 -XX:G1HeapRegionSize=33554432 -XX:InitialHeapSize=1979711488 -XX:MaxGCPauseMillis=500 -XX:MaxHeapSize=17179869184 -XX:+PrintAdaptiveSizePolicy -XX:+PrintGCDateStamps -XX:+PrintGCDetails -XX:+UseG1GC
{g1_ergonomics_record}"""


@pytest.fixture
def headerless_g1_log():
    return """

2022-01-02T11:11:01.111+0000: 6993.481: [GC pause (G1 Evacuation Pause) (young), 0.0709341 secs]
    [Parallel Time: 60.5 ms, GC Workers: 23]
        [GC Worker Start (ms): Min: 6993481.9, Avg: 6993482.5, Max: 6993483.1, Diff: 1.2]
        [Update RS (ms): Min: 0.0, Avg: 36.6, Max: 39.7, Diff: 39.7, Sum: 842.6]
            [Processed Buffers: Min: 0, Avg: 52.3, Max: 67, Diff: 67, Sum: 1203]
        [GC Worker End (ms): Min: 6993541.4, Avg: 6993541.6, Max: 6993541.8, Diff: 0.4]
    [Code Root Fixup: 0.0 ms]
    [Other: 9.0 ms]
        [Humongous Reclaim: 2.4 ms]
    [Eden: 10.9G(10.9G)->0.0B(10.9G) Survivors: 192.0M->224.0M Heap: 14.5G(18.5G)->1830.3M(18.5G)]
    [Times: user=1.17 sys=0.23, real=0.07 secs]
2022-01-02T11:11:01.111+0000: 7004.927: [GC pause (G1 Evacuation Pause) (young), 0.2189828 secs]
    [Parallel Time: 205.6 ms, GC Workers: 23]
        [Termination (ms): Min: 0.0, Avg: 159.7, Max: 167.3, Diff: 167.3, Sum: 3673.4]
    [Clear CT: 4.3 ms]
    [Other: 9.0 ms]
"""


@pytest.fixture
def make_pause():
    """Factory for PauseEvent values with sensible defaults."""

    def _make_pause(gc_type="G1 Evacuation Pause", attributes=None, pause_seconds=0.1, **kwargs):
        return PauseEvent(
            gc_type=gc_type,
            attributes=attributes if attributes is not None else ["young"],
            pause_seconds=pause_seconds,
            epoch_seconds=kwargs.pop("epoch_seconds", 1658739348),
            **kwargs,
        )

    return _make_pause


@pytest.fixture
def g1_flags():
    return GCFlags(
        collector="G1GC",
        max_heap_size_gb=32.0,
        min_heap_size_gb=32.0,
        region_size_mb=1.0,
        target_pause_millis=500,
        max_direct_memory_gb=40.0,
    )
