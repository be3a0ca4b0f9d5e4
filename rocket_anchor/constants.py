"""Rocket Anchor constants."""

from solders.pubkey import Pubkey

SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
RENT_SYSVAR_ID = Pubkey.from_string("SysvarRent111111111111111111111111111111111")

CLUSTER_URLS = {
    "localnet": "http://127.0.0.1:8899",
    "devnet": "https://api.devnet.solana.com",
    "mainnet": "https://api.mainnet-beta.solana.com",
}

ALLOWED_COMMITMENT = {"processed", "confirmed", "finalized"}
DEFAULT_COMMITMENT = "confirmed"

CONFIG_FILENAME = "ra.toml"
DEFAULT_ARTIFACTS_DIR = "./target"
DEFAULT_KEYPAIR_PATH = "~/.config/solana/id.json"

# Searched in order when no seed file is given.
SEED_SEARCH_PATHS = (
    "seeds/index.toml",
    "seeds/index.json",
    "scripts/seed.toml",
    "scripts/seed.json",
)

# Placeholder keywords and prefixes.
SIGNER_KEYWORDS = {"signer", "payer"}
SYSTEM_PROGRAM_KEYWORD = "systemProgram"
RENT_KEYWORD = "rent"
NEW_KEYPAIR_PREFIX = "new:"
PDA_PREFIX = "pda:"
PDA_SIGNER_FRAGMENT = "signer"

# Runtime limits from solana_program::pubkey; the bump seed takes one slot.
MAX_SEED_LEN = 32
MAX_SEEDS = 16

# Log read-back after confirmation.
DEFAULT_SETTLE_DELAY = 1.0
DEFAULT_LOG_WAIT_SECONDS = 10.0
DEFAULT_POLL_INTERVAL = 0.5

LAMPORTS_PER_SOL = 1_000_000_000
