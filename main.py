from rich.pretty import pprint

from positional import *

__prog__ = "dicebot"


def roll(args, *forward):
    return f"rolling {args["dice"]}d{args.get("sides") or 6}"


registry = (
    CommandRegistry()
    .add(
        Command("roll", description="roll some dice")
        .add_argset([Argument("dice").preprocess(int)])
        .add_argset([Argument("dice").preprocess(int), Argument("sides").preprocess(int)])
        .handler(roll)
    )
    .add(
        Command("say", description="repeat the words back")
        .add_argset([Argument("words").varargs()])
        .handler(lambda args, *forward: " ".join(args["words"]))
    )
    .default_handler()
    .help_handler()
)


if __name__ == '__main__':
    pprint(registry)
    while line := input("> ").strip():
        try:
            print(registry.execute(line))
        except CommandError as error:
            report(error, colorful=True, fancy=True)
