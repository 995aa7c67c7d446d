"""
Evaluation suite -- tokenizer, patterns, reports, engine, ruleset, CLI, API.

Run evals: pytest evals/ -v
"""
