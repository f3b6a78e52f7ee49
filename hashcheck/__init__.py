"""Content hash exporter package.

Fetches HTTP(S) targets with bounded concurrency, digests each response body,
verifies it against an expected digest and publishes the results as
Prometheus metrics.

Key modules:
    digest      -- SHA-256 content digest and case-insensitive comparison
    models      -- Target, Observation, TargetState
    base        -- BaseProber probe pipeline
    probers     -- RequestsProber, CurlProber concrete fetchers
    factory     -- ProberFactory for picking a prober per target
    controller  -- ProbeScheduler bounded worker pool
    metrics     -- TargetCollector, WatcherCollector and registry helpers
    exporter    -- Watcher, SnapshotExporter, OnDemandExporter scrape handlers
    poller      -- BackgroundProber for timer-driven probing
    server      -- WSGI application and HTTP listener
    config      -- YAML configuration loading
    errors      -- exception types
    log         -- logging setup
"""

__version__ = "0.3.0"
