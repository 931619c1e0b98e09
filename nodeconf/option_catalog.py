"""
Static catalog of known bitcoind configuration options.

Each option records its value type, the section it normally lives in,
a short help text and its default. The table is built once at import
time and exposed read-only.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, List, Mapping, Optional


PID_FILE_KEY = "pid"
DATADIR_KEY = "datadir"


class ValueType(Enum):
    """Value type of a configuration option."""

    BOOL = "bool"
    INT = "int"
    STR = "str"
    MULTI_STR = "multi_str"


class Category(Enum):
    """Grouping used when presenting options."""

    CORE = "core"
    NETWORK = "network"
    RPC = "rpc"
    WALLET = "wallet"
    DEBUGGING = "debugging"
    MINING = "mining"
    RELAY = "relay"
    ZMQ = "zmq"


@dataclass(frozen=True)
class OptionSpec:
    key: str
    value_type: ValueType
    section_hint: str
    help: str
    default: Any
    category: Category


_B = ValueType.BOOL
_I = ValueType.INT
_S = ValueType.STR
_M = ValueType.MULTI_STR

# Only honoured for mainnet or inside a network section
_NETWORK_SCOPED = {"addnode", "bind", "connect", "port", "rpcbind", "rpcport", "wallet", "whitebind"}

# (key, type, default, help)
_TABLE = {
    Category.CORE: [
        ("datadir", _S, None, "Specify data directory"),
        ("blocksdir", _S, None, "Specify blocks directory"),
        ("pid", _S, None, "Specify pid file"),
        ("debuglogfile", _S, None, "Specify debug log file"),
        ("settings", _S, None, "Specify settings file"),
        ("includeconf", _S, None, "Include additional config file"),
        ("loadblock", _M, None, "Import blocks from external file"),
        ("txindex", _B, False, "Maintain full transaction index"),
        ("blockfilterindex", _S, None, "Maintain compact block filter index"),
        ("coinstatsindex", _B, False, "Maintain coinstats index"),
        ("prune", _I, 0, "Reduce storage by pruning old blocks"),
        ("dbcache", _I, 450, "Database cache size in MiB"),
        ("maxmempool", _I, 300, "Maximum mempool size in MiB"),
        ("maxorphantx", _I, 100, "Maximum orphan transactions"),
        ("mempoolexpiry", _I, 336, "Mempool expiry in hours"),
        ("par", _I, 0, "Script verification threads"),
        ("blockreconstructionextratxn", _I, 100, "Extra transactions for block reconstruction"),
        ("blocksonly", _B, False, "Reject transactions from network peers"),
        ("persistmempool", _B, True, "Save mempool on shutdown"),
        ("reindex", _B, False, "Rebuild chain state and block index"),
        ("reindex-chainstate", _B, False, "Rebuild chain state from blocks"),
        ("sysperms", _B, False, "Create files with system default permissions"),
        ("daemon", _B, False, "Run in background as daemon"),
        ("daemonwait", _B, False, "Wait for initialization before backgrounding"),
        ("alertnotify", _S, None, "Command to execute on alert"),
        ("blocknotify", _S, None, "Command to execute on new block"),
        ("startupnotify", _S, None, "Command to execute on startup"),
        ("assumevalid", _S, None, "Assume blocks are valid up to this hash"),
    ],
    Category.NETWORK: [
        ("chain", _S, "main", "Chain to use (main, test, signet, regtest)"),
        ("testnet", _B, False, "Use testnet"),
        ("regtest", _B, False, "Use regtest"),
        ("signet", _B, False, "Use signet"),
        ("signetchallenge", _S, None, "Signet challenge script"),
        ("signetseednode", _M, None, "Signet seed node"),
        ("listen", _B, True, "Accept incoming connections"),
        ("bind", _M, None, "Bind to address"),
        ("whitebind", _M, None, "Bind with whitelist permissions"),
        ("port", _I, 8333, "Listen on port"),
        ("maxconnections", _I, 125, "Maximum peer connections"),
        ("maxreceivebuffer", _I, 5000, "Maximum receive buffer per connection"),
        ("maxsendbuffer", _I, 1000, "Maximum send buffer per connection"),
        ("maxuploadtarget", _I, 0, "Maximum upload target in MiB per day"),
        ("timeout", _I, 5000, "Connection timeout in milliseconds"),
        ("maxtimeadjustment", _I, 4200, "Maximum time adjustment in seconds"),
        ("bantime", _I, 86400, "Ban duration in seconds"),
        ("discover", _B, True, "Discover own IP address"),
        ("dns", _B, True, "Allow DNS lookups"),
        ("dnsseed", _B, True, "Query DNS seeds"),
        ("fixedseeds", _B, True, "Use fixed seeds if DNS fails"),
        ("forcednsseed", _B, False, "Always query DNS seeds"),
        ("seednode", _M, None, "Connect to seed node for addresses"),
        ("addnode", _M, None, "Add node to connect to"),
        ("connect", _M, None, "Connect only to specified node"),
        ("onlynet", _M, None, "Only connect to network type"),
        ("networkactive", _B, True, "Enable network activity"),
        ("proxy", _S, None, "SOCKS5 proxy"),
        ("proxyrandomize", _B, True, "Randomize proxy credentials"),
        ("onion", _S, None, "SOCKS5 proxy for Tor"),
        ("listenonion", _B, True, "Create Tor onion service"),
        ("torcontrol", _S, "127.0.0.1:9051", "Tor control port"),
        ("torpassword", _S, None, "Tor control password"),
        ("i2psam", _S, None, "I2P SAM proxy"),
        ("i2pacceptincoming", _B, True, "Accept incoming I2P connections"),
        ("cjdnsreachable", _B, False, "CJDNS reachable"),
        ("whitelist", _M, None, "Whitelist peers"),
        ("peerblockfilters", _B, False, "Serve compact block filters"),
        ("peerbloomfilters", _B, False, "Support bloom filters"),
        ("permitbaremultisig", _B, True, "Relay bare multisig"),
        ("externalip", _M, None, "Specify external IP"),
        ("upnp", _B, False, "Use UPnP for port mapping"),
        ("asmap", _S, None, "ASN mapping file"),
    ],
    Category.RPC: [
        ("server", _B, False, "Accept RPC commands"),
        ("rpcuser", _S, None, "RPC username"),
        ("rpcpassword", _S, None, "RPC password"),
        ("rpcauth", _M, None, "RPC auth credentials"),
        ("rpccookiefile", _S, None, "RPC cookie file location"),
        ("rpcport", _I, 8332, "RPC port"),
        ("rpcbind", _M, None, "RPC bind address"),
        ("rpcallowip", _M, None, "Allow RPC from IP"),
        ("rpcthreads", _I, 4, "RPC worker threads"),
        ("rpcserialversion", _I, 1, "RPC serialization version"),
        ("rpcwhitelist", _S, None, "RPC method whitelist"),
        ("rpcwhitelistdefault", _B, True, "Default RPC whitelist behavior"),
        ("rest", _B, False, "Enable REST interface"),
    ],
    Category.WALLET: [
        ("disablewallet", _B, False, "Disable wallet"),
        ("wallet", _M, None, "Wallet to load"),
        ("walletdir", _S, None, "Wallet directory"),
        ("addresstype", _S, "bech32", "Default address type"),
        ("changetype", _S, None, "Change address type"),
        ("fallbackfee", _S, "0.00", "Fallback fee rate"),
        ("discardfee", _S, "0.0001", "Discard fee threshold"),
        ("mintxfee", _S, "0.00001", "Minimum transaction fee"),
        ("paytxfee", _S, "0.00", "Transaction fee rate"),
        ("consolidatefeerate", _S, "0.0001", "Consolidation fee rate"),
        ("maxapsfee", _S, "0.00", "Max fee for partial spend avoidance"),
        ("txconfirmtarget", _I, 6, "Confirmation target blocks"),
        ("spendzeroconfchange", _B, True, "Spend unconfirmed change"),
        ("walletrbf", _B, False, "Enable wallet RBF"),
        ("avoidpartialspends", _B, False, "Avoid partial spends"),
        ("keypool", _I, 1000, "Keypool size"),
        ("signer", _S, None, "External signer command"),
        ("walletbroadcast", _B, True, "Broadcast wallet transactions"),
        ("walletnotify", _S, None, "Command on wallet transaction"),
    ],
    Category.DEBUGGING: [
        ("debug", _M, None, "Debug categories"),
        ("debugexclude", _M, None, "Exclude debug categories"),
        ("logips", _B, False, "Log IP addresses"),
        ("logsourcelocations", _B, False, "Log source locations"),
        ("logthreadnames", _B, False, "Log thread names"),
        ("logtimestamps", _B, True, "Log timestamps"),
        ("shrinkdebugfile", _B, True, "Shrink debug.log on startup"),
        ("printtoconsole", _B, False, "Print to console"),
        ("uacomment", _S, None, "User agent comment"),
        ("maxtxfee", _S, "0.10", "Maximum transaction fee"),
    ],
    Category.MINING: [
        ("blockmaxweight", _I, 3996000, "Maximum block weight"),
        ("blockmintxfee", _S, "0.00001", "Minimum block transaction fee"),
    ],
    Category.RELAY: [
        ("minrelaytxfee", _S, "0.00001", "Minimum relay fee"),
        ("datacarrier", _B, True, "Relay OP_RETURN transactions"),
        ("datacarriersize", _I, 83, "Maximum OP_RETURN size"),
        ("bytespersigop", _I, 20, "Bytes per sigop"),
        ("whitelistforcerelay", _B, False, "Force relay from whitelist"),
        ("whitelistrelay", _B, True, "Relay from whitelist"),
    ],
    Category.ZMQ: [
        ("zmqpubhashblock", _S, None, "ZMQ hash block publisher"),
        ("zmqpubhashtx", _S, None, "ZMQ hash tx publisher"),
        ("zmqpubrawblock", _S, None, "ZMQ raw block publisher"),
        ("zmqpubrawtx", _S, None, "ZMQ raw tx publisher"),
        ("zmqpubsequence", _S, None, "ZMQ sequence publisher"),
    ],
}


def _build_catalog() -> Mapping[str, OptionSpec]:
    catalog = {}
    for category, rows in _TABLE.items():
        for key, value_type, default, help_text in rows:
            section_hint = "main" if key in _NETWORK_SCOPED else "default"
            catalog[key] = OptionSpec(key, value_type, section_hint, help_text, default, category)
    return MappingProxyType(catalog)


CATALOG = _build_catalog()


def lookup(key: str) -> Optional[OptionSpec]:
    """Return the OptionSpec for key, or None if the key is not known."""
    return CATALOG.get(key)


def is_known(key: str) -> bool:
    return key in CATALOG


def options_in_category(category: Category) -> List[OptionSpec]:
    """
    List the options of one category in catalog order.

    Args:
        category: Category to filter on

    Returns:
        OptionSpec list, empty if the category has no options
    """
    return [spec for spec in CATALOG.values() if spec.category is category]
