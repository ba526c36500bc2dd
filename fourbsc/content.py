import json, random, string

TITLES = [
    "exploring the future of decentralized", "blockchain technology is fascinating", "excited about web3 possibilities",
    "learning more about crypto daily", "another great day in web3 space", "the potential here is incredible",
    "building something amazing today", "diving deeper into blockchain tech", "crypto journey continues forward",
    "innovation happens every single day", "web3 is changing everything now", "decentralization matters so much",
    "excited for what comes next here", "this technology is revolutionary", "blockchain opens new possibilities",
    "the future is being built today", "learning and growing every day", "crypto space never stops moving"
]

CONTENTS = [
    "The blockchain ecosystem continues to evolve in fascinating ways.",
    "Decentralization is more than a technology.",
    "Web3 represents a fundamental shift in ownership.",
    "Building in this space requires patience.",
    "The intersection of AI and blockchain is creating opportunities.",
    "Smart contracts are revolutionizing agreements.",
]

AGENT_PREFIXES = ["Smart", "Auto", "Crypto", "DeFi", "Web3", "Chain", "Block", "Token", "AI", "Meta"]
AGENT_SUFFIXES = ["Bot", "Agent", "Helper", "Assistant", "Trader", "Analyzer", "Worker", "Manager", "Guardian"]
AGENT_DESCRIPTIONS = [
    "An intelligent agent for blockchain automation",
    "Automated trading solution",
    "AI-powered crypto assistant",
    "Smart contract interaction helper",
    "Decentralized task automation agent"
]

def random_title():
    return random.choice(TITLES)

def random_content():
    # rich-text editor document: a single paragraph node
    node_id = "".join(random.choices(string.ascii_lowercase + string.digits, k=10))
    return json.dumps([{"children": [{"text": random.choice(CONTENTS)}], "type": "p", "id": node_id}])

def random_agent_name():
    return f"{random.choice(AGENT_PREFIXES)}{random.choice(AGENT_SUFFIXES)}{random.randint(0, 999)}"

def random_agent_description():
    return random.choice(AGENT_DESCRIPTIONS)
