# src/telebugs_mcp/contracts/enums.py
"""Status codes, severities, platforms and period kinds.

Numeric codes are owned by the Telebugs Rails application that writes the
database. Lookups from a code never fail: codes this server does not know
map to an explicit UNKNOWN member.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class GroupStatus(StrEnum):
    """Lifecycle status of an error group.

    Never stored. Derived from the two nullable timestamps
    (groups.resolved_at, groups.muted_at) by ``GroupStatus.derive``.
    """

    OPEN = "open"
    RESOLVED = "resolved"
    MUTED = "muted"

    @classmethod
    def derive(cls, resolved_at: str | None, muted_at: str | None) -> GroupStatus:
        """Resolved wins over muted; neither set means open."""
        if resolved_at is not None:
            return cls.RESOLVED
        if muted_at is not None:
            return cls.MUTED
        return cls.OPEN


class Severity(StrEnum):
    """Report severity.

    Stored in database as an integer (reports.severity).
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    DEBUG = "debug"
    FATAL = "fatal"
    UNKNOWN = "unknown"

    @classmethod
    def from_code(cls, code: int | None) -> Severity:
        if code is None:
            return cls.UNKNOWN
        return _SEVERITY_BY_CODE.get(code, cls.UNKNOWN)


_SEVERITY_BY_CODE: dict[int, Severity] = {
    0: Severity.ERROR,
    1: Severity.WARNING,
    2: Severity.INFO,
    3: Severity.DEBUG,
    4: Severity.FATAL,
}


class PeriodType(IntEnum):
    """Aggregation period of a report_aggregates row.

    Stored in database (report_aggregates.period_type).
    """

    HOUR = 0
    DAY = 1
    WEEK = 2
    MONTH = 3

    @classmethod
    def from_name(cls, name: str) -> PeriodType:
        return cls[name.upper()]


class Platform(StrEnum):
    """SDK platform a project was created for.

    Stored in database as an integer (projects.platform). Members are
    declared in storage-code order: RUBY is code 0, DEFAULT_INTEGRATIONS
    is code 166. UNKNOWN is last and has no code.
    """

    RUBY = "Ruby"
    RUBY_ON_RAILS = "Ruby on Rails"
    PHP = "PHP"
    LARAVEL = "Laravel"
    JAVASCRIPT = "JavaScript"
    ANDROID = "Android"
    APPLE = "Apple"
    DART = "Dart"
    FLUTTER = "Flutter"
    ELIXIR = "Elixir"
    PHOENIX = "Phoenix"
    OBAN = "Oban"
    QUANTUM = "Quantum"
    TVOS = "tvOS"
    MACOS = "macOS"
    VISIONOS = "visionOS"
    WATCHOS = "watchOS"
    IOS = "iOS"
    UNREAL_ENGINE = "Unreal Engine"
    UNITY = "Unity"
    RUST = "Rust"
    DELAYED_JOB = "DelayedJob"
    RACK_MIDDLEWARE = "Rack Middleware"
    RESQUE = "Resque"
    SIDEKIQ = "Sidekiq"
    REACT_NATIVE = "React Native"
    REACT = "React"
    PYTHON = "Python"
    GO = "Go"
    ECHO = "Echo"
    FASTHTTP = "FastHTTP"
    FIBER = "Fiber"
    GIN = "Gin"
    IRIS = "Iris"
    LOGRUS = "Logrus"
    NEGRONI = "Negroni"
    NET_HTTP = "net/http"
    SLOG = "Slog"
    ZEROLOG = "Zerolog"
    GODOT_ENGINE = "Godot Engine"
    JAVA = "Java"
    JAVA_UTIL_LOGGING = "java.util.logging"
    LOG4J_2X = "Log4j 2x"
    LOGBACK = "Logback"
    SERVLET = "Servlet"
    SPRING = "Spring"
    SPRING_BOOT = "Spring Boot"
    ANGULAR = "Angular"
    ASTRO = "Astro"
    AWS_LAMBDA_JAVASCRIPT = "AWS Lambda (JavaScript)"
    AZURE_FUNCTIONS_JAVASCRIPT = "Azure Functions (JavaScript)"
    BUN = "Bun"
    CAPACITOR = "Capacitor"
    CLOUDFLARE = "Cloudflare"
    CONNECT = "Connect"
    CORDOVA = "Cordova"
    DENO = "Deno"
    ELECTRON = "Electron"
    EMBER = "Ember"
    EXPRESS = "Express"
    FASTIFY = "Fastify"
    GATSBY = "Gatsby"
    GOOGLE_CLOUD_FUNCTIONS_JAVASCRIPT = "Google Cloud Functions (JavaScript)"
    HAPI = "Hapi"
    HONO = "Hono"
    KOA = "Koa"
    NESTJS = "Nest.js"
    NEXTJS = "Next.js"
    NODEJS = "Node.js"
    NUXT = "Nuxt"
    REACT_ROUTER_FRAMEWORK = "React Router Framework"
    REMIX = "Remix"
    SOLID = "Solid"
    SOLIDSTART = "SolidStart"
    SVELTE = "Svelte"
    SVELTEKIT = "SvelteKit"
    TANSTACK_START_REACT = "TanStack Start React"
    VUE = "Vue"
    WASM = "Wasm"
    KOTLIN = "Kotlin"
    KOTLIN_MULTIPLATFORM = "Kotlin Multiplatform"
    NATIVE = "Native"
    GOOGLE_BREAKPAD = "Google Breakpad"
    GOOGLE_CRASHPAD = "Google Crashpad"
    MINIDUMPS = "Minidumps"
    QT = "Qt"
    WEBASSEMBLY = "WebAssembly"
    DOTNET = ".NET"
    ASPNET = "ASP.NET"
    ASPNET_CORE = "ASP.NET Core"
    AWS_LAMBDA_DOTNET = "AWS Lambda (.NET)"
    AZURE_FUNCTIONS_DOTNET = "Azure Functions (.NET)"
    GOOGLE_CLOUD_FUNCTIONS_DOTNET = "Google Cloud Functions (.NET)"
    BLAZOR_WEBASSEMBLY = "Blazor WebAssembly"
    ENTITY_FRAMEWORK = "Entity Framework"
    LOG4NET = "log4net"
    MICROSOFT_EXTENSIONS_LOGGING = "Microsoft.Extensions.Logging"
    NLOG = "NLog"
    SERILOG = "Serilog"
    UWP = "UWP"
    WINDOWS_FORMS = "Windows Forms"
    WPF = "WPF"
    MAUI = "MAUI"
    XAMARIN = "Xamarin"
    NINTENDO_SWITCH = "Nintendo Switch"
    SYMFONY = "Symfony"
    POWERSHELL = "PowerShell"
    AIOHTTP = "AIOHTTP"
    ANTHROPIC = "Anthropic"
    APACHE_AIRFLOW = "Apache Airflow"
    APACHE_BEAM = "Apache Beam"
    APACHE_SPARK = "Apache Spark"
    ARIADNE = "Ariadne"
    ARQ = "arq"
    ASGI = "ASGI"
    ASYNCIO = "asyncio"
    ASYNCPG = "asyncpg"
    AWS_LAMBDA_PYTHON = "AWS Lambda (Python)"
    BOTO3 = "Boto3"
    BOTTLE = "Bottle"
    CELERY = "Celery"
    CHALICE = "Chalice"
    CLICKHOUSE_DRIVER = "clickhouse-driver"
    CLOUD_RESOURCE_CONTEXT = "Cloud Resource Context"
    COHERE = "Cohere"
    DJANGO = "Django"
    DRAMATIQ = "Dramatiq"
    FALCON = "Falcon"
    FASTAPI = "FastAPI"
    FLASK = "Flask"
    GNU_BACKTRACE = "GNU Backtrace"
    GOOGLE_CLOUD_FUNCTIONS_PYTHON = "Google Cloud Functions (Python)"
    GQL = "GQL"
    GRAPHENE = "Graphene"
    GRPC = "gRPC"
    HTTPX = "HTTPX"
    HUEY = "huey"
    HUGGINGFACE_HUB = "Huggingface Hub"
    LANGCHAIN = "Langchain"
    LAUNCHDARKLY = "LaunchDarkly"
    LITESTAR = "Litestar"
    LOGGING = "Logging"
    LOGURU = "Loguru"
    OPENAI = "OpenAI"
    OPENFEATURE = "OpenFeature"
    PURE_EVAL = "pure_eval"
    PYMONGO = "PyMongo"
    PYRAMID = "Pyramid"
    QUART = "Quart"
    RAY = "Ray"
    REDIS = "Redis"
    RQ = "RQ (Redis Queue)"
    RUST_TRACING = "Rust Tracing"
    SANIC = "Sanic"
    SERVERLESS = "Serverless"
    SOCKET = "Socket"
    SQLALCHEMY = "SQLAlchemy"
    STARLETTE = "Starlette"
    STATSIG = "Statsig"
    STRAWBERRY = "Strawberry"
    SYS_EXIT = "sys.exit"
    TORNADO = "Tornado"
    TRYTON = "Tryton"
    TYPER = "Typer"
    UNLEASH = "Unleash"
    WSGI = "WSGI"
    DEFAULT_INTEGRATIONS = "Default Integrations"
    UNKNOWN = "unknown"

    @classmethod
    def from_code(cls, code: int | None) -> Platform:
        if code is None or not 0 <= code < len(_PLATFORM_BY_CODE):
            return cls.UNKNOWN
        return _PLATFORM_BY_CODE[code]


_PLATFORM_BY_CODE: tuple[Platform, ...] = tuple(p for p in Platform if p is not Platform.UNKNOWN)
