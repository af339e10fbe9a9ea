from lib.gate_types import (
    ContextInjection,
    KeywordRule,
    PathRule,
    ReferenceTable,
    RuleTable,
)

# Rules are evaluated top to bottom and the first match decides, so more
# specific patterns must come before the catch-alls (e.g. *.rb last).

# =============================================================================
# RUBY CONVENTIONS
# =============================================================================

# Owned by the rails-conventions table
RAILS_OWNED_PATHS = [
    "*/app/*",
    "*/config/*",
    "*/db/*",
    "*/lib/tasks/*",
]


def _ruby_rule(file_type: str, patterns: list[str], skill: str) -> PathRule:
    return PathRule(
        file_type=file_type,
        patterns=patterns,
        required_capability=f"ruby-conventions:{skill}",
        exclusions=RAILS_OWNED_PATHS,
        exclusion_reason="Rails file -> skipping (handled by rails-conventions)",
    )


RUBY_RULES = RuleTable(
    name="ruby-conventions",
    description="Requires Ruby convention skills before editing plain Ruby files.",
    log_file="/tmp/claude-ruby-conventions.log",
    rules=[
        _ruby_rule(
            "gem configuration",
            ["*/Gemfile", "*/Gemfile.lock", "*.gemspec"],
            "ruby-gem-conventions",
        ),
        _ruby_rule(
            "RSpec spec",
            ["*/spec/*_spec.rb", "*/spec/spec_helper.rb", "*/spec/rails_helper.rb"],
            "ruby-testing",
        ),
        _ruby_rule(
            "Minitest test",
            ["*/test/*_test.rb", "*/test/test_helper.rb"],
            "ruby-testing",
        ),
        _ruby_rule("Ruby", ["*.rb"], "ruby-style-guide"),
    ],
)

# =============================================================================
# RAILS CONVENTIONS
# =============================================================================

STATE_RESOURCE_CONTROLLERS = ["closures", "pins", "watches", "publications", "archivals"]


def _rails_rule(
    file_type: str,
    patterns: list[str],
    skill: str,
    inject: ContextInjection | None = None,
) -> PathRule:
    return PathRule(
        file_type=file_type,
        patterns=patterns,
        required_capability=f"rails-conventions:{skill}",
        inject=inject,
    )


RAILS_RULES = RuleTable(
    name="rails-conventions",
    description="Requires Rails convention skills before editing Rails application files.",
    log_file="/tmp/claude-skill-usage.log",
    rules=[
        _rails_rule("CurrentAttributes", ["*/app/models/current.rb"], "rails-current-attributes"),
        _rails_rule(
            "state resource controller",
            [
                pattern
                for name in STATE_RESOURCE_CONTROLLERS
                for pattern in (
                    f"*/app/controllers/{name}_controller.rb",
                    f"*/app/controllers/*/{name}_controller.rb",
                )
            ],
            "rails-state-resources",
        ),
        _rails_rule("controller", ["*/app/controllers/*.rb"], "rails-controller-conventions"),
        _rails_rule(
            "event model",
            [
                "*/app/models/event.rb",
                "*/app/models/event/*.rb",
                "*/app/models/concerns/eventable.rb",
            ],
            "rails-events",
        ),
        _rails_rule(
            "notification model",
            [
                "*/app/models/notification.rb",
                "*/app/models/notification/*.rb",
                "*/app/models/notifier.rb",
                "*/app/models/notifier/*.rb",
                "*/app/models/concerns/notifiable.rb",
            ],
            "rails-notifications",
        ),
        _rails_rule("model", ["*/app/models/*.rb"], "rails-model-conventions"),
        _rails_rule("view", ["*/app/views/*.erb"], "rails-view-conventions"),
        # Helpers are discouraged; the view conventions explain the ViewComponent move
        _rails_rule("helper", ["*/app/helpers/*.rb"], "rails-view-conventions"),
        _rails_rule(
            "ViewComponent",
            ["*/app/components/*.rb", "*/app/components/*.html.erb"],
            "rails-view-conventions",
            inject=ContextInjection(references=["rails-viewcomponent/references/*.md"]),
        ),
        _rails_rule(
            "Stimulus controller",
            [
                "*/app/components/*_controller.js",
                "*/app/packs/controllers/*_controller.js",
                "*/app/javascript/controllers/*_controller.js",
            ],
            "rails-stimulus-conventions",
            inject=ContextInjection(references=["rails-hotwire/references/stimulus.md"]),
        ),
        _rails_rule(
            "Turbo Stream template",
            ["*.turbo_stream.erb"],
            "rails-hotwire",
            inject=ContextInjection(references=["rails-hotwire/references/turbo.md"]),
        ),
        _rails_rule("policy", ["*/app/policies/*.rb"], "rails-policy-conventions"),
        _rails_rule("job", ["*/app/jobs/*.rb"], "rails-job-conventions"),
        _rails_rule("migration", ["*/db/migrate/*.rb"], "rails-migration-conventions"),
        _rails_rule("spec", ["*/spec/*.rb"], "rails-testing-conventions"),
        _rails_rule(
            "multi-tenancy initializer",
            [
                "*/config/initializers/*tenant*.rb",
                "*/config/initializers/tenanting/*.rb",
            ],
            "rails-multitenancy",
        ),
    ],
)

RULE_TABLES = {table.name: table for table in (RUBY_RULES, RAILS_RULES)}

# =============================================================================
# PROMPT REFERENCE TABLES
# =============================================================================

RUBY_REFERENCES = ReferenceTable(
    name="ruby-references",
    header="# Relevant Ruby API References (auto-loaded based on your question)",
    rules=[
        KeywordRule(
            pattern=(
                r"rspec|describe.*do|context.*do|it.*do|let\(|subject\(|shared_examples"
                r"|shared_context|before.*do|expect\(|allow\(|receive\("
            ),
            references=["ruby-testing/references/rspec.md"],
        ),
        KeywordRule(
            pattern=(
                r"minitest|assert_equal|assert_nil|assert_raises|assert_includes"
                r"|assert_difference|activesupport::testcase|test.*do"
            ),
            references=["ruby-testing/references/minitest.md"],
        ),
        KeywordRule(
            pattern=(
                r"value object|service object|query object|form object|design pattern"
                r"|solid|composition|builder pattern|decorator"
            ),
            references=["ruby-class-design/references/design-patterns.md"],
        ),
        KeywordRule(
            pattern=(
                r"class structure|class order|attr_reader|attr_accessor|belongs_to"
                r"|has_many|validates|before_save|after_create"
            ),
            references=["ruby-style-guide/references/class-structure.md"],
        ),
        KeywordRule(
            pattern=(
                r"gemfile|gemspec|bundle|gem version|version constraint|pessimistic|bundler"
            ),
            references=["ruby-gem-conventions/references/version-constraints.md"],
        ),
        KeywordRule(
            pattern=(
                r"bundle install|bundle update|bundle exec|bundle add|bundle outdated"
                r"|bundle audit|bundle config"
            ),
            references=["ruby-gem-conventions/references/bundle-commands.md"],
        ),
        KeywordRule(
            pattern=r"gemspec|spec\.name|spec\.version|add_dependency|add_development_dependency",
            references=["ruby-gem-conventions/references/gemspec-guide.md"],
        ),
    ],
)

_VIEWCOMPONENT_REFS = "rails-viewcomponent/references"
_TURBO_REF = "rails-hotwire/references/turbo.md"
_STIMULUS_REF = "rails-hotwire/references/stimulus.md"

RAILS_REFERENCES = ReferenceTable(
    name="rails-references",
    header="# Relevant API References (auto-loaded based on your question)",
    rules=[
        # --- ViewComponent ---
        KeywordRule(
            pattern=r"renders_one|renders_many|slot|polymorphic|with_header|with_footer|with_item",
            references=[f"{_VIEWCOMPONENT_REFS}/slots.md"],
        ),
        KeywordRule(
            pattern=(
                r"render_inline|assert_selector|viewcomponent::testcase|component test"
                r"|render_preview|testing component"
            ),
            references=[f"{_VIEWCOMPONENT_REFS}/testing.md"],
        ),
        KeywordRule(
            pattern=r"preview|viewcomponent::preview|rails/view_components|lookbook",
            references=[f"{_VIEWCOMPONENT_REFS}/previews.md"],
        ),
        KeywordRule(
            pattern=(
                r"with_collection|_counter|_iteration|collection_parameter|collection_iteration"
            ),
            references=[f"{_VIEWCOMPONENT_REFS}/collections.md"],
        ),
        KeywordRule(
            pattern=r"before_render|around_render|after_initialize|lifecycle|render\?",
            references=[f"{_VIEWCOMPONENT_REFS}/lifecycle.md"],
        ),
        KeywordRule(
            pattern=r"erb_template|call method|inline template|template variant|sidecar",
            references=[f"{_VIEWCOMPONENT_REFS}/templates.md"],
        ),
        KeywordRule(
            pattern=r"i18n|translation|locale|t\(|translate",
            references=[f"{_VIEWCOMPONENT_REFS}/translations.md"],
        ),
        KeywordRule(
            pattern=r"helpers\.|helper method|view context|content_tag",
            references=[f"{_VIEWCOMPONENT_REFS}/helpers.md"],
        ),
        # --- Turbo ---
        KeywordRule(
            pattern=(
                r"turbo.stream|turbo_stream|broadcasts_to|broadcast_append"
                r"|broadcast_replace|broadcast_remove|turbo_stream_from"
            ),
            references=[_TURBO_REF],
        ),
        KeywordRule(
            pattern=r"turbo.frame|turbo-frame|data-turbo-frame|lazy loading frame",
            references=[_TURBO_REF],
        ),
        KeywordRule(
            pattern=r'turbo.drive|data-turbo="false"|turbo-cache-control|turbo-progress-bar',
            references=[_TURBO_REF],
        ),
        # --- Stimulus ---
        KeywordRule(
            pattern=(
                r"stimulus|data-controller|data-action|static targets|static values"
                r"|connect\(\)|disconnect\(\)|controller\.js"
            ),
            references=[_STIMULUS_REF],
        ),
        KeywordRule(
            pattern=r"static outlets|outlet|outletconnected",
            references=[_STIMULUS_REF],
        ),
        KeywordRule(
            pattern=r"static classes|hasactiveclass|activeclass",
            references=[_STIMULUS_REF],
        ),
    ],
)

_COMMIT_SPEC_REF = "conventional-commits/references/specification.md"

GIT_REFERENCES = ReferenceTable(
    name="git-references",
    header="# Conventional Commits Reference (auto-loaded)",
    rules=[
        KeywordRule(
            pattern=(
                r"conventional commit|commit message|commit format|commit type|feat:|fix:"
                r"|docs:|style:|refactor:|perf:|test:|build:|ci:|chore:|revert:"
                r"|breaking change|semver|semantic version"
            ),
            references=[_COMMIT_SPEC_REF],
        ),
        # Generic commit questions still get the Conventional Commits reference
        KeywordRule(
            pattern=(
                r"how.*(should|do).*(i|we).*commit|what.*commit.*type|write.*commit"
                r"|format.*commit|good commit"
            ),
            references=[_COMMIT_SPEC_REF],
            only_if_empty=True,
        ),
    ],
)

REFERENCE_TABLES = {
    table.name: table for table in (RUBY_REFERENCES, RAILS_REFERENCES, GIT_REFERENCES)
}
