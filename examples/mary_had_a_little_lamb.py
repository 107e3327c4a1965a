"""Find a word and use the evidence to get it back."""

import lup

words = ["mary", "had", "a", "little", "lamb"]

if __name__ == "__main__":
    lamb = lup.evaluate_any(lup.by(words), lambda i: words[i] == "lamb")
    print(f"Is there any word `lamb`? {lamb.value}")
    print(f"Evidence: {lamb.evidence}")
    print(f"Word at the evidence: {lup.resolve_evidence(words, lamb.evidence)}")
