"""Engine components: partitions, learners, measures, predictions, execution and tuning."""
