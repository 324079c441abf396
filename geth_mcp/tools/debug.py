"""debug_* tools.

Fields whose shape is owned by the node (block selectors, tracer configs,
call objects) are declared as opaque values and forwarded untouched.
"""

from __future__ import annotations

from typing import Any

from geth_mcp.mcp import ToolRegistry
from geth_mcp.tools.forwarding import (
    ForwardTool,
    Param,
    any_value,
    boolean,
    number,
    optional,
    register_forward_tools,
    string,
    trailing,
)

BLOCK_SELECTOR = any_value("Block number, tag or hash")
TRACE_OPTIONS = optional("options", any_value("Tracer configuration object"), default={})
TRACE_CONFIG = optional("config", any_value("Tracer configuration object"), default={})


def _file_tool(name: str, description: str) -> ForwardTool:
    return ForwardTool(name, description, (Param("file", string()),))


def _profile_tool(name: str, description: str, duration: str = "seconds") -> ForwardTool:
    return ForwardTool(name, description, (Param("file", string()), Param(duration, number())))


def _block_selector_tool(name: str, description: str) -> ForwardTool:
    return ForwardTool(name, description, (Param("blockNrOrHash", BLOCK_SELECTOR),))


DEBUG_TOOLS = (
    ForwardTool(
        "debug_accountRange",
        "Retrieves account range at a given block.",
        (
            Param("blockNrOrHash", BLOCK_SELECTOR),
            Param("start", string()),
            Param("maxResults", number()),
            Param("nocode", boolean()),
            Param("nostorage", boolean()),
            Param("incompletes", boolean()),
        ),
    ),
    ForwardTool(
        "debug_backtraceAt",
        "Sets the logging backtrace location. When a backtrace location is set and a log message is emitted at "
        "that location, the stack of the goroutine executing the log statement will be printed to stderr. The "
        "location is specified as <filename>:<line>.",
        (Param("location", string()),),
    ),
    _profile_tool(
        "debug_blockProfile",
        "Turns on block profiling for the given duration and writes profile data to disk. It uses a profile rate "
        "of 1 for most accurate information. If a different rate is desired, set the rate and write the profile "
        "manually using debug_writeBlockProfile.",
    ),
    ForwardTool(
        "debug_chaindbCompact",
        "Flattens the entire key-value database into a single level, removing all unused slots and merging all keys.",
    ),
    ForwardTool(
        "debug_chaindbProperty",
        "Returns leveldb properties of the key-value database.",
        (Param("property", string()),),
    ),
    _profile_tool(
        "debug_cpuProfile",
        "Turns on CPU profiling for the given duration and writes profile data to disk.",
    ),
    ForwardTool(
        "debug_dbAncient",
        "Retrieves an ancient binary blob from the freezer. The freezer is a collection of append-only immutable "
        "files. The first argument kind specifies which table to look up data from.",
        (Param("kind", string()), Param("number", number())),
    ),
    ForwardTool("debug_dbAncients", "Returns the number of ancient items in the ancient store."),
    ForwardTool(
        "debug_dbGet",
        "Returns the raw value of a key stored in the database.",
        (Param("key", string()),),
    ),
    ForwardTool(
        "debug_dumpBlock",
        "Retrieves the state that corresponds to the block number and returns a list of accounts (including "
        "storage and code).",
        (Param("number", number()),),
    ),
    ForwardTool("debug_freeOSMemory", "Forces garbage collection."),
    ForwardTool(
        "debug_freezeClient",
        "Forces a temporary client freeze, normally when the server is overloaded. Available as part of LES "
        "light server.",
        (Param("node", string()),),
    ),
    ForwardTool("debug_gcStats", "Returns garbage collection statistics."),
    ForwardTool(
        "debug_getAccessibleState",
        "Returns the first number where the node has accessible state on disk. This is the post-state of that "
        "block and the pre-state of the next block. The (from, to) parameters are the sequence of blocks to "
        "search, which can go either forwards or backwards.",
        (Param("from", BLOCK_SELECTOR), Param("to", BLOCK_SELECTOR)),
    ),
    ForwardTool(
        "debug_getBadBlocks",
        "Returns a list of the last 'bad blocks' that the client has seen on the network and returns them as a "
        "JSON list of block-hashes.",
    ),
    _block_selector_tool("debug_getRawBlock", "Retrieves and returns the RLP encoded block by number."),
    _block_selector_tool("debug_getRawHeader", "Returns an RLP-encoded header."),
    ForwardTool(
        "debug_getRawTransaction",
        "Returns the bytes of the transaction.",
        (Param("hash", string()),),
    ),
    ForwardTool(
        "debug_getModifiedAccountsByHash",
        "Returns all accounts that have changed between the two blocks specified. A change is defined as a "
        "difference in nonce, balance, code hash, or storage hash. With one parameter, returns the list of "
        "accounts modified in the specified block.",
        (Param("startHash", string()), trailing("endHash", string())),
    ),
    ForwardTool(
        "debug_getModifiedAccountsByNumber",
        "Returns all accounts that have changed between the two blocks specified. A change is defined as a "
        "difference in nonce, balance, code hash or storage hash.",
        (Param("startNum", number()), trailing("endNum", number())),
    ),
    _block_selector_tool(
        "debug_getRawReceipts",
        "Returns the consensus-encoding of all receipts in a single block.",
    ),
    _profile_tool(
        "debug_goTrace",
        "Turns on Go runtime tracing for the given duration and writes trace data to disk.",
    ),
    ForwardTool(
        "debug_intermediateRoots",
        "Executes a block (bad- or canon- or side-), and returns a list of intermediate roots: the stateroot "
        "after each transaction.",
        (Param("blockHash", string()), TRACE_OPTIONS),
    ),
    ForwardTool("debug_memStats", "Returns detailed runtime memory statistics."),
    _profile_tool(
        "debug_mutexProfile",
        "Turns on mutex profiling for nsec seconds and writes profile data to file. It uses a profile rate of 1 "
        "for most accurate information. If a different rate is desired, set the rate and write the profile "
        "manually.",
        duration="nsec",
    ),
    ForwardTool(
        "debug_preimage",
        "Returns the preimage for a sha3 hash, if known.",
        (Param("hash", string()),),
    ),
    ForwardTool(
        "debug_printBlock",
        "Retrieves a block and returns its pretty printed form.",
        (Param("number", number()),),
    ),
    ForwardTool(
        "debug_setBlockProfileRate",
        "Sets the rate (in samples/sec) of goroutine block profile data collection. A non-zero rate enables "
        "block profiling, setting it to zero stops the profile. Collected profile data can be written using "
        "debug_writeBlockProfile.",
        (Param("rate", number()),),
    ),
    ForwardTool(
        "debug_setGCPercent",
        "Sets the garbage collection target percentage. A negative value disables garbage collection.",
        (Param("v", number()),),
    ),
    ForwardTool(
        "debug_setHead",
        "Sets the current head of the local chain by block number. Note, this is a destructive action and may "
        "severely damage your chain. Use with extreme caution.",
        (Param("number", number()),),
    ),
    ForwardTool(
        "debug_setMutexProfileFraction",
        "Sets the rate of mutex profiling.",
        (Param("rate", number()),),
    ),
    ForwardTool(
        "debug_setTrieFlushInterval",
        "Configures how often in-memory state tries are persisted to disk. The interval needs to be in a format "
        "parsable by a time.Duration.",
        (Param("interval", string()),),
    ),
    ForwardTool(
        "debug_stacks",
        "Returns a printed representation of the stacks of all goroutines.",
        (optional("filter", string()),),
    ),
    ForwardTool(
        "debug_standardTraceBlockToFile",
        "Streams output to disk during the execution, to not blow up the memory usage on the node. It uses "
        "jsonl as output format (to allow streaming). Uses a cross-client standardized output.",
        (Param("blockHash", string()), TRACE_CONFIG),
    ),
    ForwardTool(
        "debug_standardTraceBadBlockToFile",
        "This method is similar to debug_standardTraceBlockToFile, but can be used to obtain info about a block "
        "which has been rejected as invalid (for some reason).",
        (Param("blockHash", string()), TRACE_CONFIG),
    ),
    _file_tool("debug_startCPUProfile", "Turns on CPU profiling indefinitely, writing to the given file."),
    _file_tool("debug_startGoTrace", "Starts writing a Go runtime trace to the given file."),
    ForwardTool("debug_stopCPUProfile", "Stops an ongoing CPU profile."),
    ForwardTool("debug_stopGoTrace", "Stops writing the Go runtime trace."),
    ForwardTool(
        "debug_storageRangeAt",
        "Returns the storage at the given block height and transaction index. The result can be paged by "
        "providing a maxResult to cap the number of storage slots returned as well as specifying the offset via "
        "keyStart (hash of storage key).",
        (
            Param("blockHash", string()),
            Param("txIdx", number()),
            Param("contractAddress", string()),
            Param("keyStart", string()),
            Param("maxResult", number()),
        ),
    ),
    ForwardTool(
        "debug_traceBadBlock",
        "Returns the structured logs created during the execution of EVM against a block pulled from the pool "
        "of bad ones and returns them as a JSON object.",
        (Param("blockHash", string()), TRACE_OPTIONS),
    ),
    ForwardTool(
        "debug_traceBlock",
        "Returns a full stack trace of all invoked opcodes of all transaction that were included in this block. "
        "Note, the parent of this block must be present or it will fail.",
        (Param("blockRlp", string()), TRACE_OPTIONS),
    ),
    ForwardTool(
        "debug_traceBlockByNumber",
        "Similar to debug_traceBlock, traceBlockByNumber accepts a block number and will replay the block that "
        "is already present in the database.",
        (Param("number", BLOCK_SELECTOR), TRACE_OPTIONS),
    ),
    ForwardTool(
        "debug_traceBlockByHash",
        "Similar to debug_traceBlock, traceBlockByHash accepts a block hash and will replay the block that is "
        "already present in the database.",
        (Param("hash", string()), TRACE_OPTIONS),
    ),
    ForwardTool(
        "debug_traceBlockFromFile",
        "Similar to debug_traceBlock, traceBlockFromFile accepts a file containing the RLP of the block.",
        (Param("fileName", string()), TRACE_OPTIONS),
    ),
    ForwardTool(
        "debug_traceCall",
        "Runs an eth_call within the context of the given block execution using the final state of parent block "
        "as the base. The first argument is a transaction object. The block can be specified either by hash or "
        "by number as the second argument. The trace can be configured similar to debug_traceTransaction.",
        (Param("args", any_value("Transaction call object")), Param("blockNrOrHash", BLOCK_SELECTOR), TRACE_CONFIG),
    ),
    ForwardTool(
        "debug_traceTransaction",
        "Attempts to run the transaction in the exact same manner as it was executed on the network. It will "
        "replay any transaction that may have been executed prior to this one before it will finally attempt to "
        "execute the transaction that corresponds to the given hash.",
        (Param("txHash", string()), TRACE_OPTIONS),
    ),
    ForwardTool(
        "debug_verbosity",
        "Sets the logging verbosity ceiling. Log messages with level up to and including the given level will "
        "be printed.",
        (Param("level", number()),),
    ),
    ForwardTool(
        "debug_vmodule",
        "Sets the logging verbosity pattern.",
        (Param("pattern", string()),),
    ),
    _file_tool("debug_writeBlockProfile", "Writes a goroutine blocking profile to the given file."),
    _file_tool(
        "debug_writeMemProfile",
        "Writes an allocation profile to the given file. Note that the profiling rate cannot be set through the "
        "API, it must be set on the command line using the --pprof.memprofilerate flag.",
    ),
    _file_tool("debug_writeMutexProfile", "Writes a goroutine blocking profile to the given file."),
)


def register_debug_tools(registry: ToolRegistry, client: Any) -> None:
    register_forward_tools(registry, client, DEBUG_TOOLS)
