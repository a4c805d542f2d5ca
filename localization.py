from events import ActivityLogged, DomainEvent, LeveledUp, QuestCompleted


class Translator:
    def __init__(self) -> None:
        self.language = "en"
        self.translations = {
            "en": {},
            "es": {
                "Level Up!": "¡Subiste de nivel!",
                "You reached level {level}.": "Alcanzaste el nivel {level}.",
                "Quest Complete": "Misión completada",
                "{title} +{exp} EXP, +{coins} coins": "{title} +{exp} EXP, +{coins} monedas",
                "Workout logged": "Entrenamiento registrado",
                "Diet logged": "Comida registrada",
                "Weight logged": "Peso registrado",
                "Photo added": "Foto añadida",
                "+{exp} EXP": "+{exp} EXP",
                "Body metrics saved.": "Medidas guardadas.",
            },
        }

    def set_language(self, lang: str) -> None:
        self.language = lang

    def gettext(self, key: str) -> str:
        return self.translations.get(self.language, {}).get(key, key)

    def notification(self, event: DomainEvent) -> tuple[str, str]:
        """Render ``event`` as a ``(title, description)`` toast."""
        _ = self.gettext
        if isinstance(event, LeveledUp):
            return _("Level Up!"), _("You reached level {level}.").format(level=event.level)
        if isinstance(event, QuestCompleted):
            return _("Quest Complete"), _("{title} +{exp} EXP, +{coins} coins").format(
                title=event.title,
                exp=_number(event.reward_exp),
                coins=event.reward_coins,
            )
        if isinstance(event, ActivityLogged):
            titles = {
                "workout": "Workout logged",
                "diet": "Diet logged",
                "weight": "Weight logged",
                "photo": "Photo added",
            }
            title = _(titles.get(event.kind, event.kind))
            if event.kind in ("workout", "diet"):
                return title, _("+{exp} EXP").format(exp=round(event.exp))
            if event.kind == "weight":
                return title, _("Body metrics saved.")
            return title, ""
        return type(event).__name__, ""


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


translator = Translator()
