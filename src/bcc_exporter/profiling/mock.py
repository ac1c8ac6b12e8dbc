# profiling/mock.py

_MOCK_STACKS = (
    ("main;runtime.main;main.main;net/http.ListenAndServe;net/http.(*Server).Serve", 10),
    ("main;runtime.main;main.main;net/http.ListenAndServe;net/http.(*Server).Serve;net/http.(*conn).serve", 25),
    ("main;runtime.main;main.main;net/http.ListenAndServe;net/http.(*Server).Serve;net/http.(*conn).serve;"
     "net/http.serverHandler.ServeHTTP", 15),
    ("redis-server;main;aeMain;aeProcessEvents;aeApiPoll", 50),
    ("redis-server;main;aeMain;aeProcessEvents;processCommand;lookupCommand", 30),
    ("redis-server;main;aeMain;aeProcessEvents;processCommand;call", 40),
)


def generate_mock_profile(pid: str, seconds: int) -> str:
    """Synthetic folded stacks for test mode. Same input, same output."""
    lines = [f"# Mock profile data for PID {pid}, duration {seconds} seconds"]
    lines += [f"{stack} {count}" for stack, count in _MOCK_STACKS]
    return "\n".join(lines) + "\n"
