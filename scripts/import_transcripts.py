"""Import coaching-call transcripts from TRANSCRIPT_DIR into Supabase."""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from coaching_knowledge.ingestion.cli import main

if __name__ == "__main__":
    main()
