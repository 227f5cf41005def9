"""
Field-level value suggestions for a partially filled business listing.

Modules
-------
rules       : Typed suggestion rules and modifiers, DEFAULT_RULES /
              DEFAULT_MODIFIERS registration order — pure functions.
engine      : SuggestionEngine (run rules, filter, dedupe, rank) plus
              module-level generate_suggestions() / get_field_suggestions().
formatting  : format_suggestion_value() display helper.
preferences : SuggestionPreferences, filter_suggestions(), and the stateful
              SuggestionSession (debounce, last-write-wins, dismiss/apply).
"""
